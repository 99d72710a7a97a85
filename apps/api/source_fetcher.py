from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable

import httpx

from .errors import FetchError

logger = logging.getLogger(__name__)


class SourceFetcher:
    """Fetch raw text over HTTP. Non-2xx responses count as failures."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self.client = client

    async def fetch(self, url: str) -> str:
        try:
            response = await self.client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning('fetch failed url=%s error=%s', url, exc)
            raise FetchError(url, str(exc) or exc.__class__.__name__) from exc
        return response.text


async def gather_or_cancel(*awaitables: Awaitable[Any]) -> list[Any]:
    """Like asyncio.gather, but the first failure cancels and awaits the rest."""
    tasks = [asyncio.ensure_future(item) for item in awaitables]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
