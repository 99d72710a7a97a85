from __future__ import annotations

import logging

from .errors import AssetFetchError, FetchError
from .module_parser import ParsedModule, import_bindings, import_source
from .source_fetcher import SourceFetcher, gather_or_cancel

logger = logging.getLogger(__name__)

GENERATED_LOGO_MARKER = '/chains/generated'
LOGO_ASSET_SUFFIX = '.ts'


def resolve_logo_references(module: ParsedModule) -> dict[str, str]:
    """Map each name imported from a generated logo module to its asset filename."""
    references: dict[str, str] = {}
    for statement in module.imports():
        source = import_source(statement)
        if not source or GENERATED_LOGO_MARKER not in source:
            continue
        filename = source.rsplit('/', 1)[-1] + LOGO_ASSET_SUFFIX
        for name in import_bindings(statement):
            references[name] = filename
    return references


async def fetch_logo_assets(
    fetcher: SourceFetcher,
    base_url: str,
    references: dict[str, str]
) -> dict[str, str]:
    if not references:
        return {}

    async def fetch_one(name: str, filename: str) -> tuple[str, str]:
        url = f'{base_url}{filename}'
        try:
            return name, await fetcher.fetch(url)
        except FetchError as exc:
            raise AssetFetchError(name, url, exc.reason) from exc

    results = await gather_or_cancel(*(fetch_one(name, filename) for name, filename in references.items()))
    logger.debug('fetched %d logo assets', len(results))
    return dict(results)
