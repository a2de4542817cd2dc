import logging
from decimal import Decimal
from typing import Optional

from invoiceflow.models.invoice import Invoice, InvoiceStatus
from invoiceflow.repositories.invoice_repo import InvoiceRepository
from invoiceflow.services.balance_service import BalanceUnavailableError
from invoiceflow.utils.validation import parse_amount

logger = logging.getLogger(__name__)


def is_settled(observed_balance: Decimal, requested_amount: Decimal) -> bool:
    """Overpayment settles an invoice, underpayment does not."""
    return observed_balance >= requested_amount


def mark_paid(invoice: Invoice) -> Invoice:
    """Copy of the invoice with status paid; a paid invoice is returned as-is."""
    if invoice.status == InvoiceStatus.PAID:
        return invoice
    return invoice.model_copy(update={"status": InvoiceStatus.PAID})


class ReconciliationService:
    """
    Drives the pending → paid transition from observed address balances.

    A balance lookup failure leaves the invoice pending. The USD snapshot is
    carried over untouched.
    """

    def __init__(self, balance_source, repository: Optional[InvoiceRepository] = None):
        self.balance_source = balance_source
        self.repository = repository

    async def reconcile(self, invoice: Invoice) -> Invoice:
        if invoice.status != InvoiceStatus.PENDING:
            return invoice

        requested = parse_amount(invoice.amount_btc)
        if requested is None:
            logger.warning("Invoice %s has an unparseable amount %r", invoice.id, invoice.amount_btc)
            return invoice

        try:
            balance = await self.balance_source.fetch_balance(invoice.recipient_address)
        except BalanceUnavailableError as e:
            logger.warning("Balance unavailable for invoice %s: %s", invoice.id, e)
            return invoice

        if not is_settled(balance, requested):
            return invoice

        paid = mark_paid(invoice)
        if self.repository is not None:
            stored = await self.repository.replace(paid)
            if not stored:
                logger.info("Invoice %s is not stored, status updated in memory only", invoice.id)
        logger.info("Invoice %s settled with balance %s BTC", invoice.id, balance)
        return paid
