import logging
from decimal import Decimal

import httpx

from invoiceflow.core.config import settings

logger = logging.getLogger(__name__)

SATOSHIS_PER_BTC = Decimal(100_000_000)


class BalanceUnavailableError(Exception):
    """The balance of an address could not be determined."""
    pass


class BlockchairBalanceProvider:
    """Confirmed balance of an address from the Blockchair dashboard API."""

    def __init__(self, url: str | None = None, timeout: float | None = None, transport: httpx.AsyncBaseTransport | None = None):
        self.url = url or settings.BLOCKCHAIR_ADDRESS_URL
        self.timeout = settings.BALANCE_TIMEOUT_SECONDS if timeout is None else timeout
        self.transport = transport

    async def fetch_balance(self, address: str) -> Decimal:
        """Balance in BTC. An address the API knows nothing about has zero."""
        address = address.strip()
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(self.url.format(address=address))
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            raise BalanceUnavailableError(f"Balance lookup failed for {address}: {e}") from e

        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            raise BalanceUnavailableError(f"Unexpected balance format for {address}")

        entry = data.get(address)
        details = entry.get("address") if isinstance(entry, dict) else None
        satoshis = (details.get("balance") if isinstance(details, dict) else None) or 0
        if isinstance(satoshis, bool) or not isinstance(satoshis, (int, float, str)):
            raise BalanceUnavailableError(f"Unexpected balance value for {address}: {satoshis!r}")

        try:
            balance = Decimal(str(satoshis))
        except ArithmeticError as e:
            raise BalanceUnavailableError(f"Unexpected balance value for {address}: {satoshis!r}") from e
        if not balance.is_finite() or balance < 0:
            raise BalanceUnavailableError(f"Unexpected balance value for {address}: {satoshis!r}")

        return balance / SATOSHIS_PER_BTC


async def check_payment_status(provider, address: str, expected: Decimal) -> bool:
    """True once the address holds at least the expected amount."""
    try:
        balance = await provider.fetch_balance(address)
    except BalanceUnavailableError as e:
        logger.warning("Error checking payment status: %s", e)
        return False
    return balance >= expected


balance_provider = BlockchairBalanceProvider()


def get_balance_provider() -> BlockchairBalanceProvider:
    return balance_provider
