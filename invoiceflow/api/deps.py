from fastapi import Depends

from invoiceflow.core.config import settings
from invoiceflow.db.session import get_invoice_repository
from invoiceflow.models.invoice import Invoice
from invoiceflow.repositories.invoice_repo import InvoiceRepository
from invoiceflow.schemas.invoice import InvoiceEnvelope
from invoiceflow.services.balance_service import get_balance_provider
from invoiceflow.services.invoice_service import build_payment_uri, explorer_url
from invoiceflow.services.reconciliation_service import ReconciliationService
from invoiceflow.services.share_link import build_share_link, encode_invoice


def get_reconciliation_service(
    repository: InvoiceRepository = Depends(get_invoice_repository),
    balance_provider=Depends(get_balance_provider),
) -> ReconciliationService:
    return ReconciliationService(balance_provider, repository)


def to_envelope(invoice: Invoice) -> InvoiceEnvelope:
    token = encode_invoice(invoice)
    return InvoiceEnvelope(
        invoice=invoice,
        payment_uri=build_payment_uri(invoice),
        explorer_url=explorer_url(invoice.recipient_address),
        share_token=token,
        share_link=build_share_link(token, settings.PUBLIC_ORIGIN),
    )
