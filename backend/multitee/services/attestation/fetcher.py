"""
Quote Fetcher

Retrieves the current attestation quote of a peer TEE.
"""

import asyncio
import logging
from typing import Optional

import aiohttp

from .exceptions import QuoteFetchError
from .models import AttestationQuote, TeeNode

logger = logging.getLogger(__name__)

ATTESTATION_PATH = "/attestation"


class QuoteFetcher:
    """
    Fetches `GET {endpoint}/attestation` from peers.

    Every failure (timeout, refused connection, non-200 status, malformed
    body) surfaces as QuoteFetchError so the orchestrator can record a
    negative result and move on.
    """

    def __init__(self, timeout_seconds: float = 10.0):
        self.timeout_seconds = timeout_seconds
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds)
            )
        return self._session

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def fetch(self, node: TeeNode) -> AttestationQuote:
        """
        Fetch and normalize a peer's quote.

        Args:
            node: Peer to fetch from

        Returns:
            Hex-encoded AttestationQuote with enclosing quoting stripped

        Raises:
            QuoteFetchError: On any transport or payload failure
        """
        url = f"{node.endpoint}{ATTESTATION_PATH}"
        logger.debug(f"Fetching attestation from {url}")

        try:
            session = await self._get_session()
            async with session.get(
                url, timeout=aiohttp.ClientTimeout(total=self.timeout_seconds)
            ) as response:
                if response.status != 200:
                    text = await response.text()
                    raise QuoteFetchError(node.id, f"HTTP {response.status}: {text[:200]}")
                body = await response.json(content_type=None)
        except QuoteFetchError:
            raise
        except asyncio.TimeoutError as e:
            raise QuoteFetchError(node.id, f"timed out after {self.timeout_seconds}s") from e
        except aiohttp.ClientError as e:
            raise QuoteFetchError(node.id, f"unreachable: {e}") from e
        except ValueError as e:
            raise QuoteFetchError(node.id, f"invalid JSON body: {e}") from e

        quote = body.get("quote") if isinstance(body, dict) else None
        if not isinstance(quote, str) or not quote.strip():
            raise QuoteFetchError(node.id, "response has no 'quote' field")

        return AttestationQuote.from_hex(quote)
