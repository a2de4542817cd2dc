from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from invoiceflow.models.invoice import Invoice


class InvoiceEnvelope(BaseModel):
    """Invoice plus everything needed to present it for payment."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    invoice: Invoice
    payment_uri: str
    explorer_url: str
    share_token: str
    share_link: str


class ShareFragmentRequest(BaseModel):
    """Request body carrying a URL fragment such as '#/pay?data=...'."""
    fragment: str


class ClearResponse(BaseModel):
    success: bool

