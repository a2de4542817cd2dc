from fastapi import APIRouter, Depends, HTTPException

from invoiceflow.models.invoice import PriceSnapshot
from invoiceflow.services.price_service import PriceService, PriceUnavailableError, get_price_service

router = APIRouter()

@router.get("", response_model=PriceSnapshot)
async def get_price(prices: PriceService = Depends(get_price_service)):
    """Current BTC/USD rate, cached between refreshes"""
    try:
        return await prices.current_price()
    except PriceUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
