from fastapi import APIRouter
from invoiceflow.api.v1.endpoints import invoices, pay, price

api_router = APIRouter()

api_router.include_router(invoices.router, prefix="/invoices", tags=["invoices"])
api_router.include_router(pay.router, prefix="/pay", tags=["share links"])
api_router.include_router(price.router, prefix="/price", tags=["price"])
