from fastapi import APIRouter, Depends, HTTPException, Query

from invoiceflow.api.deps import get_reconciliation_service, to_envelope
from invoiceflow.schemas.invoice import InvoiceEnvelope, ShareFragmentRequest
from invoiceflow.services.reconciliation_service import ReconciliationService
from invoiceflow.services.share_link import decode_invoice, extract_share_token

router = APIRouter()

def _decode_or_404(token: str):
    invoice = decode_invoice(token)
    if invoice is None:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return invoice

@router.get("", response_model=InvoiceEnvelope)
async def open_shared_invoice(data: str = Query(...)):
    """Decode the invoice carried by a share token"""
    return to_envelope(_decode_or_404(data))

@router.post("/resolve", response_model=InvoiceEnvelope)
async def resolve_share_fragment(body: ShareFragmentRequest):
    """Extract the share token from a '#/pay?data=...' fragment and decode it"""
    token = extract_share_token(body.fragment)
    if token is None:
        raise HTTPException(status_code=404, detail="No share token found")
    return to_envelope(_decode_or_404(token))

@router.post("/reconcile", response_model=InvoiceEnvelope)
async def reconcile_shared_invoice(
    data: str = Query(...),
    reconciliation: ReconciliationService = Depends(get_reconciliation_service),
):
    """
    Check payment for a shared invoice.

    The stored copy is updated when this invoice is in the local history,
    otherwise only the returned view changes.
    """
    invoice = _decode_or_404(data)
    return to_envelope(await reconciliation.reconcile(invoice))
