"""
Invoice model - a Bitcoin payment request.

Design principles:
- Immutable once created, replaced wholesale on mutation
- Status: pending → paid (expired is reserved, never assigned)
- Wire and storage format uses camelCase keys
- The strict schema doubles as the shape guard for untrusted input
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, ValidationError
from pydantic.alias_generators import to_camel


class InvoiceStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    EXPIRED = "expired"


class Invoice(BaseModel):
    """
    Payment request for a fixed recipient and amount.

    Invariants:
    - amount_btc is canonical (see utils.validation.format_amount)
    - amount_usd is a creation-time snapshot, never recomputed
    - status only moves pending → paid
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    id: StrictStr
    recipient_address: StrictStr
    amount_btc: StrictStr
    amount_usd: StrictStr
    description: StrictStr
    created_at: StrictInt  # epoch milliseconds
    status: InvoiceStatus

    def to_wire(self) -> dict:
        """camelCase dict as stored and shared."""
        return self.model_dump(mode="json", by_alias=True)


class PriceSnapshot(BaseModel):
    """BTC/USD rate at a point in time."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    usd: float = Field(gt=0, allow_inf_nan=False)
    last_updated: int  # epoch milliseconds


class InvoiceDraft(BaseModel):
    """Raw form input for a new invoice."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    recipient_address: str
    amount_btc: str
    description: str = ""


def is_invoice(value: Any) -> bool:
    return coerce_invoice(value) is not None


def coerce_invoice(value: Any) -> Optional[Invoice]:
    """Return value as an Invoice if it matches the camelCase schema exactly, else None."""
    if not isinstance(value, dict):
        return None
    try:
        return Invoice.model_validate(value, by_alias=True, by_name=False)
    except ValidationError:
        return None
