#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path

from apps.api.chain_registry import get_chain_registry
from apps.api.config import get_settings
from apps.api.errors import ChainRegistryError

LOGGER = logging.getLogger('chain_registry.dump')


def build_payload(network: str | None) -> dict:
    settings = get_settings()
    chains = asyncio.run(get_chain_registry(network, settings=settings))
    return {
        'generated_at': datetime.now(timezone.utc).isoformat(),
        'sources': {
            'polkadot': settings.polkadot_source_url,
            'kusama': settings.kusama_source_url
        },
        'network': network,
        'chains': [chain.to_dict() for chain in chains]
    }


def main() -> None:
    parser = argparse.ArgumentParser(description='Build the relay chain registry once and dump it as JSON')
    parser.add_argument('--network', default=None, help='Only keep chains of this network (polkadot, kusama)')
    parser.add_argument('--out', default=None, help='Output file; stdout when omitted')
    args = parser.parse_args()

    logging.basicConfig(
        level=os.getenv('LOG_LEVEL', 'INFO').upper(),
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s'
    )

    try:
        payload = build_payload(args.network)
    except ChainRegistryError as exc:
        LOGGER.error('registry build failed: %s', exc.detail)
        sys.exit(1)

    body = json.dumps(payload, indent=2) + '\n'
    if args.out is None:
        sys.stdout.write(body)
        return

    out_path = Path(args.out)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(body, encoding='utf-8')
    LOGGER.info('wrote %d chains to %s', len(payload['chains']), out_path)


if __name__ == '__main__':
    main()
