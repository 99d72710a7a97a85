from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import httpx

from .chain_extractor import Chain, extract_chains
from .config import Settings, get_settings
from .logo_assets import fetch_logo_assets, resolve_logo_references
from .module_parser import parse_module
from .source_fetcher import SourceFetcher, gather_or_cancel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NetworkSource:
    network: str
    url: str


def default_sources(settings: Settings) -> tuple[NetworkSource, ...]:
    return (
        NetworkSource(network='polkadot', url=settings.polkadot_source_url),
        NetworkSource(network='kusama', url=settings.kusama_source_url)
    )


class ChainRegistryBuilder:
    """Build the merged chain list from per-network endpoint modules.

    Every call fetches and parses from scratch. Logo assets of all modules are
    pooled into one map before extraction, so a later source's import name
    shadows an earlier source's asset of the same name.
    """

    def __init__(self, fetcher: SourceFetcher, sources: Sequence[NetworkSource], logo_base_url: str) -> None:
        self.fetcher = fetcher
        self.sources = tuple(sources)
        self.logo_base_url = logo_base_url

    async def build(self, network: str | None = None) -> list[Chain]:
        texts = await gather_or_cancel(*(self.fetcher.fetch(source.url) for source in self.sources))
        modules = [parse_module(text) for text in texts]

        asset_maps = await gather_or_cancel(
            *(
                fetch_logo_assets(self.fetcher, self.logo_base_url, resolve_logo_references(module))
                for module in modules
            )
        )
        assets: dict[str, str] = {}
        for asset_map in asset_maps:
            assets.update(asset_map)

        chains: list[Chain] = []
        for source, module in zip(self.sources, modules):
            extracted = extract_chains(module, assets, source.network)
            logger.info('extracted %d chains network=%s', len(extracted), source.network)
            chains.extend(extracted)

        if network:
            return [chain for chain in chains if chain.network == network]
        return chains


async def get_chain_registry(
    network: str | None = None,
    *,
    settings: Settings | None = None,
    client: httpx.AsyncClient | None = None
) -> list[Chain]:
    settings = settings or get_settings()
    if client is None:
        async with httpx.AsyncClient(timeout=settings.fetch_timeout_seconds) as owned:
            return await get_chain_registry(network, settings=settings, client=owned)

    builder = ChainRegistryBuilder(
        fetcher=SourceFetcher(client),
        sources=default_sources(settings),
        logo_base_url=settings.logo_base_url
    )
    return await builder.build(network)
