import asyncio
import unittest

import httpx

from apps.api.errors import AssetFetchError
from apps.api.logo_assets import fetch_logo_assets, resolve_logo_references
from apps.api.module_parser import parse_module
from apps.api.source_fetcher import SourceFetcher

LOGO_BASE_URL = 'https://assets.test/logos/chains/generated/'

ENDPOINTS_SOURCE = '''
import type { EndpointOption } from './types';

import { chainsAcalaSVG } from '../ui/logos/chains/generated/acala';
import { chainsPolkadotCircleSVG as relayLogo } from '../ui/logos/chains/generated/polkadotCircle';
import { nodesAstarPNG } from '../ui/logos/nodes/generated/astar';
import { chainsDuplicateSVG } from '../ui/logos/chains/generated/first';
import { chainsDuplicateSVG } from '../ui/logos/chains/generated/second';

export const prodChains: EndpointOption[] = [];
'''


class LogoReferenceTests(unittest.TestCase):
    def test_maps_generated_chain_logo_imports(self) -> None:
        references = resolve_logo_references(parse_module(ENDPOINTS_SOURCE))

        self.assertEqual(
            references,
            {
                'chainsAcalaSVG': 'acala.ts',
                'relayLogo': 'polkadotCircle.ts',
                'chainsDuplicateSVG': 'second.ts'
            }
        )

    def test_module_without_logo_imports(self) -> None:
        references = resolve_logo_references(parse_module("import { x } from './x';\nexport const a = [];\n"))
        self.assertEqual(references, {})


class LogoAssetFetchTests(unittest.IsolatedAsyncioTestCase):
    async def test_fetches_every_reference(self) -> None:
        requested: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested.append(str(request.url))
            name = request.url.path.rsplit('/', 1)[-1]
            return httpx.Response(200, text=f'<svg id="{name}"/>')

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            assets = await fetch_logo_assets(
                SourceFetcher(client),
                LOGO_BASE_URL,
                {'chainsAcalaSVG': 'acala.ts', 'relayLogo': 'polkadotCircle.ts'}
            )

        self.assertEqual(
            assets,
            {
                'chainsAcalaSVG': '<svg id="acala.ts"/>',
                'relayLogo': '<svg id="polkadotCircle.ts"/>'
            }
        )
        self.assertEqual(
            sorted(requested),
            [f'{LOGO_BASE_URL}acala.ts', f'{LOGO_BASE_URL}polkadotCircle.ts']
        )

    async def test_empty_references_skip_fetching(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError(f'unexpected request {request.url}')

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            assets = await fetch_logo_assets(SourceFetcher(client), LOGO_BASE_URL, {})

        self.assertEqual(assets, {})

    async def test_single_failure_fails_whole_map(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith('missing.ts'):
                return httpx.Response(404, text='404: Not Found')
            return httpx.Response(200, text='<svg/>')

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with self.assertRaises(AssetFetchError) as ctx:
                await fetch_logo_assets(
                    SourceFetcher(client),
                    LOGO_BASE_URL,
                    {'chainsAcalaSVG': 'acala.ts', 'chainsMissingSVG': 'missing.ts'}
                )

        self.assertEqual(ctx.exception.name, 'chainsMissingSVG')
        self.assertEqual(ctx.exception.url, f'{LOGO_BASE_URL}missing.ts')

    async def test_failure_cancels_pending_fetches(self) -> None:
        cancelled: list[str] = []

        async def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith('missing.ts'):
                return httpx.Response(404, text='404: Not Found')
            try:
                await asyncio.sleep(30)
            except asyncio.CancelledError:
                cancelled.append(request.url.path.rsplit('/', 1)[-1])
                raise
            return httpx.Response(200, text='<svg/>')

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with self.assertRaises(AssetFetchError):
                await fetch_logo_assets(
                    SourceFetcher(client),
                    LOGO_BASE_URL,
                    {'chainsSlowSVG': 'slow.ts', 'chainsMissingSVG': 'missing.ts'}
                )

        self.assertEqual(cancelled, ['slow.ts'])
