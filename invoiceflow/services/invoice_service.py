import time
import uuid
from decimal import Decimal
from typing import Callable, Optional
from urllib.parse import quote

from pydantic import BaseModel

from invoiceflow.core.config import settings
from invoiceflow.models.invoice import Invoice, InvoiceDraft, InvoiceStatus, PriceSnapshot
from invoiceflow.utils.validation import format_amount, format_usd, is_valid_address, parse_amount

INVALID_ADDRESS_MESSAGE = "Enter a valid BTC address (legacy or bc1)."
INVALID_AMOUNT_MESSAGE = "Enter a valid BTC amount (up to 8 decimals)."


class InvoiceValidationError(ValueError):
    """Raised when an invoice is created from a draft that does not validate."""
    pass


class DraftValidation(BaseModel):
    ok: bool
    amount: Optional[Decimal] = None
    error: Optional[str] = None


def now_ms() -> int:
    return int(time.time() * 1000)


def new_invoice_id() -> str:
    return str(uuid.uuid4())


def validate_draft(draft: InvoiceDraft) -> DraftValidation:
    """Check address then amount, reporting the first failure."""
    if not is_valid_address(draft.recipient_address):
        return DraftValidation(ok=False, error=INVALID_ADDRESS_MESSAGE)

    amount = parse_amount(draft.amount_btc)
    if amount is None:
        return DraftValidation(ok=False, error=INVALID_AMOUNT_MESSAGE)

    return DraftValidation(ok=True, amount=amount)


def create_invoice(
    draft: InvoiceDraft,
    price: PriceSnapshot,
    now: Callable[[], int] = now_ms,
    new_id: Callable[[], str] = new_invoice_id,
) -> Invoice:
    """
    Build a pending invoice from a draft and the current price.

    The USD value is a snapshot of amount * price at creation time.
    Raises InvoiceValidationError if the draft does not validate.
    """
    validation = validate_draft(draft)
    if not validation.ok:
        raise InvoiceValidationError(validation.error)

    amount_usd = format_usd(validation.amount * Decimal(str(price.usd)))

    return Invoice(
        id=new_id(),
        recipient_address=draft.recipient_address.strip(),
        amount_btc=format_amount(validation.amount),
        amount_usd=amount_usd,
        description=draft.description.strip(),
        created_at=now(),
        status=InvoiceStatus.PENDING,
    )


def build_payment_uri(invoice: Invoice) -> str:
    address = invoice.recipient_address.strip()
    amount = invoice.amount_btc.strip()
    return f"bitcoin:{address}?amount={quote(amount, safe='')}"


def explorer_url(address: str) -> str:
    return settings.EXPLORER_ADDRESS_URL.format(address=address.strip())
