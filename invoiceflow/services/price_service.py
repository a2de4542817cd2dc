import logging
import math
import time
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Sequence

import httpx

from invoiceflow.core.config import settings
from invoiceflow.models.invoice import PriceSnapshot
from invoiceflow.services.invoice_service import now_ms

logger = logging.getLogger(__name__)


class PriceProviderError(Exception):
    """A single price provider could not produce a rate."""
    pass


class PriceUnavailableError(Exception):
    """Every configured price provider failed."""
    pass


def _positive_rate(value) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return None
    if not isinstance(value, (int, float)) or not math.isfinite(value) or value <= 0:
        return None
    return float(value)


class HttpPriceProvider(ABC):
    """Fetches a BTC/USD rate from one JSON endpoint."""

    name = "http"

    def __init__(self, url: str, timeout: float | None = None, transport: httpx.AsyncBaseTransport | None = None):
        self.url = url
        self.timeout = settings.PRICE_TIMEOUT_SECONDS if timeout is None else timeout
        self.transport = transport

    @abstractmethod
    def extract_rate(self, payload) -> Optional[float]:
        """USD rate from the decoded payload, or None if it is not usable."""

    async def fetch_price(self) -> PriceSnapshot:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(self.url)
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            raise PriceProviderError(f"{self.name}: {e}") from e

        rate = self.extract_rate(payload)
        if rate is None:
            raise PriceProviderError(f"{self.name}: unexpected ticker format")
        return PriceSnapshot(usd=rate, last_updated=now_ms())


class BlockchainInfoPriceProvider(HttpPriceProvider):
    name = "blockchain.info"

    def __init__(self, url: str | None = None, **kwargs):
        super().__init__(url or settings.BLOCKCHAIN_INFO_TICKER_URL, **kwargs)

    def extract_rate(self, payload) -> Optional[float]:
        usd = payload.get("USD") if isinstance(payload, dict) else None
        last = usd.get("last") if isinstance(usd, dict) else None
        # The ticker reports numbers; a string here means the format changed
        if isinstance(last, str):
            return None
        return _positive_rate(last)


class CoinbasePriceProvider(HttpPriceProvider):
    name = "coinbase"

    def __init__(self, url: str | None = None, **kwargs):
        super().__init__(url or settings.COINBASE_SPOT_URL, **kwargs)

    def extract_rate(self, payload) -> Optional[float]:
        data = payload.get("data") if isinstance(payload, dict) else None
        amount = data.get("amount") if isinstance(data, dict) else None
        if not isinstance(amount, str):
            return None
        return _positive_rate(amount)


def default_providers() -> List[HttpPriceProvider]:
    return [BlockchainInfoPriceProvider(), CoinbasePriceProvider()]


class PriceService:
    """
    Ordered price provider chain.

    Providers are tried in sequence; the first rate wins. Failure is only
    reported once every provider has failed.
    """

    def __init__(
        self,
        providers: Sequence | None = None,
        refresh_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.providers = list(providers) if providers is not None else default_providers()
        self.refresh_seconds = settings.PRICE_REFRESH_SECONDS if refresh_seconds is None else refresh_seconds
        self.clock = clock
        self._latest: Optional[PriceSnapshot] = None
        self._fetched_at: Optional[float] = None

    @property
    def latest(self) -> Optional[PriceSnapshot]:
        return self._latest

    async def fetch_price(self) -> PriceSnapshot:
        for provider in self.providers:
            try:
                snapshot = await provider.fetch_price()
            except PriceProviderError as e:
                logger.warning("Price provider failed: %s", e)
                continue
            self._latest = snapshot
            self._fetched_at = self.clock()
            return snapshot
        raise PriceUnavailableError("Could not fetch BTC price from any provider")

    async def current_price(self) -> PriceSnapshot:
        """Cached snapshot, refreshed once older than refresh_seconds."""
        if self._latest is not None and self.clock() - self._fetched_at < self.refresh_seconds:
            return self._latest
        return await self.fetch_price()


price_service = PriceService()


def get_price_service() -> PriceService:
    return price_service
