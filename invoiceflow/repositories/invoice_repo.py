"""
InvoiceRepository - durable store of the invoice list.

Storage layout:
- One document per named slot in the ``storage_slots`` collection
- The slot value is the JSON text of an array of camelCase invoices
- A save replaces the whole document in one write

The store is never trusted: an absent, unparseable or non-list slot reads
as empty, and entries failing the shape guard are dropped on load.
"""

import json
import logging
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from invoiceflow.models.invoice import Invoice, coerce_invoice

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "invoice_flow_history_btc"


class InvoiceRepository:
    """Repository for the persisted invoice collection."""

    def __init__(self, db: AsyncIOMotorDatabase, key: str = DEFAULT_STORAGE_KEY):
        self.db = db
        self.collection = db["storage_slots"]
        self.key = key

    async def load(self) -> List[Invoice]:
        """Stored invoices, newest first."""
        doc = await self.collection.find_one({"_id": self.key})
        raw = doc.get("value") if doc else None
        if not raw or not isinstance(raw, str):
            return []

        try:
            parsed = json.loads(raw)
        except ValueError:
            logger.warning("Invoice slot %r holds unparseable JSON, reading as empty", self.key)
            return []

        if not isinstance(parsed, list):
            logger.warning("Invoice slot %r does not hold a list, reading as empty", self.key)
            return []

        invoices = [invoice for invoice in map(coerce_invoice, parsed) if invoice is not None]
        dropped = len(parsed) - len(invoices)
        if dropped:
            logger.info("Dropped %d malformed invoice(s) from slot %r", dropped, self.key)

        invoices.sort(key=lambda invoice: invoice.created_at, reverse=True)
        return invoices

    async def save(self, invoices: List[Invoice]) -> None:
        """Overwrite the slot with the full list."""
        value = json.dumps([invoice.to_wire() for invoice in invoices], ensure_ascii=False)
        await self.collection.replace_one(
            {"_id": self.key},
            {"_id": self.key, "value": value},
            upsert=True
        )

    async def clear(self) -> None:
        """Remove the slot entirely."""
        await self.collection.delete_one({"_id": self.key})

    async def get(self, invoice_id: str) -> Optional[Invoice]:
        for invoice in await self.load():
            if invoice.id == invoice_id:
                return invoice
        return None

    async def add(self, invoice: Invoice) -> List[Invoice]:
        """Prepend a new invoice and persist the collection."""
        existing = [item for item in await self.load() if item.id != invoice.id]
        invoices = [invoice, *existing]
        await self.save(invoices)
        return invoices

    async def replace(self, invoice: Invoice) -> bool:
        """
        Replace the stored invoice with the same id.

        Returns False without writing when no stored invoice has that id.
        """
        invoices = await self.load()
        if not any(item.id == invoice.id for item in invoices):
            return False

        await self.save([invoice if item.id == invoice.id else item for item in invoices])
        return True
