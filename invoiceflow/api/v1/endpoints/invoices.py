import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from invoiceflow.api.deps import get_reconciliation_service, to_envelope
from invoiceflow.db.session import get_invoice_repository
from invoiceflow.models.invoice import Invoice, InvoiceDraft
from invoiceflow.repositories.invoice_repo import InvoiceRepository
from invoiceflow.schemas.invoice import ClearResponse, InvoiceEnvelope
from invoiceflow.services.invoice_service import create_invoice as build_invoice, validate_draft
from invoiceflow.services.price_service import PriceService, PriceUnavailableError, get_price_service
from invoiceflow.services.reconciliation_service import ReconciliationService

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("", response_model=InvoiceEnvelope, status_code=201)
async def create_invoice(
    draft: InvoiceDraft,
    repository: InvoiceRepository = Depends(get_invoice_repository),
    prices: PriceService = Depends(get_price_service),
):
    """Validate a draft, snapshot the price, store and return the new invoice"""
    validation = validate_draft(draft)
    if not validation.ok:
        raise HTTPException(status_code=422, detail=validation.error)

    try:
        price = await prices.current_price()
    except PriceUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))

    invoice = build_invoice(draft, price)
    await repository.add(invoice)
    logger.info("Created invoice %s for %s BTC", invoice.id, invoice.amount_btc)
    return to_envelope(invoice)

@router.get("", response_model=List[Invoice])
async def list_invoices(
    limit: Optional[int] = Query(None, ge=1),
    repository: InvoiceRepository = Depends(get_invoice_repository),
):
    """Stored invoices, newest first"""
    invoices = await repository.load()
    if limit is not None:
        invoices = invoices[:limit]
    return invoices

@router.delete("", response_model=ClearResponse)
async def clear_invoices(repository: InvoiceRepository = Depends(get_invoice_repository)):
    """Remove every stored invoice"""
    await repository.clear()
    return ClearResponse(success=True)

@router.get("/{invoice_id}", response_model=InvoiceEnvelope)
async def get_invoice(
    invoice_id: str,
    repository: InvoiceRepository = Depends(get_invoice_repository),
):
    invoice = await repository.get(invoice_id)
    if not invoice:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return to_envelope(invoice)

@router.post("/{invoice_id}/reconcile", response_model=InvoiceEnvelope)
async def reconcile_invoice(
    invoice_id: str,
    repository: InvoiceRepository = Depends(get_invoice_repository),
    reconciliation: ReconciliationService = Depends(get_reconciliation_service),
):
    """Check the recipient balance and mark the invoice paid once settled"""
    invoice = await repository.get(invoice_id)
    if not invoice:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return to_envelope(await reconciliation.reconcile(invoice))
