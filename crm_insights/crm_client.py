"""CRM account feed client."""

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from .config import Settings
from .models import Account
from .sources import AccountSource, extract_records, normalize_account

logger = logging.getLogger(__name__)


class CrmAPIError(RuntimeError):
    """Raised when the account feed cannot be reached or answers with an error."""


class AsyncCrmClient(AccountSource):
    """
    Async account feed client using httpx.
    - Auth: Bearer token
    - No retries; a failed request surfaces once
    """

    def __init__(
        self,
        settings: Settings,
        *,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize the async CRM client."""
        self.feed_url = settings.crm_feed_url
        if self.feed_url and not self.feed_url.startswith("http"):
            raise ValueError("crm_feed_url must include scheme, e.g. https://...")

        self.limit = settings.crm_feed_limit
        self.probe_timeout = settings.probe_timeout

        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if settings.crm_api_key:
            headers["Authorization"] = f"Bearer {settings.crm_api_key}"

        self._client = httpx.AsyncClient(timeout=timeout, headers=headers, transport=transport)

    async def aclose(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def close(self) -> None:
        await self.aclose()

    async def __aenter__(self) -> "AsyncCrmClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def fetch_accounts(self) -> list[Account]:
        """
        Fetch and normalize accounts from the feed.

        Returns:
            List of accounts; empty when no feed URL is configured

        Raises:
            CrmAPIError: On transport failure, HTTP error, invalid JSON or an
                invalid account record
        """
        if not self.feed_url:
            logger.info("No CRM feed configured - returning empty list")
            return []

        try:
            resp = await self._client.post(self.feed_url, json={"limit": self.limit})
        except httpx.RequestError as e:
            raise CrmAPIError(f"Request to CRM feed failed: {e}") from e

        if resp.status_code >= 400:
            raise CrmAPIError(f"CRM feed error (HTTP {resp.status_code}): {resp.text}")

        try:
            data = resp.json()
        except ValueError as e:
            raise CrmAPIError(f"Invalid JSON response: {e}") from e

        try:
            return [normalize_account(record) for record in extract_records(data)]
        except ValidationError as e:
            raise CrmAPIError(f"Invalid account record: {e}") from e

    async def ping(self) -> bool:
        """
        Probe the feed with a bounded timeout.

        Any HTTP response counts as reachable.

        Returns:
            True if the feed answered, False otherwise
        """
        if not self.feed_url:
            return False
        try:
            await self._client.get(self.feed_url, timeout=self.probe_timeout)
        except httpx.HTTPError as e:
            logger.info("CRM feed unreachable at %s: %s", self.feed_url, e)
            return False
        return True
