from motor.motor_asyncio import AsyncIOMotorDatabase

from invoiceflow.core.config import settings
from invoiceflow.db.mongo import mongodb
from invoiceflow.repositories.invoice_repo import InvoiceRepository


async def get_database() -> AsyncIOMotorDatabase:
    """Return the active database connection."""
    return mongodb.db


async def get_invoice_repository() -> InvoiceRepository:
    """Invoice store bound to the active connection and configured slot."""
    db = await get_database()
    return InvoiceRepository(db, key=settings.INVOICE_STORAGE_KEY)
