from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

APPS_CONFIG_COMMIT = '359e8b48d19bad1165e028a4391df4f748385279'
APPS_CONFIG_BASE_URL = (
    f'https://raw.githubusercontent.com/polkadot-js/apps/{APPS_CONFIG_COMMIT}/packages/apps-config/src'
)


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        parsed = float(value)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


@dataclass(frozen=True)
class Settings:
    app_name: str
    environment: Literal['dev', 'prod', 'test']
    cors_origins: str
    polkadot_source_url: str
    kusama_source_url: str
    logo_base_url: str
    fetch_timeout_seconds: float
    secret_api_key: str


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    environment = os.getenv('ENVIRONMENT', 'dev').strip().lower()
    if environment not in {'dev', 'prod', 'test'}:
        environment = 'dev'

    logo_base_url = os.getenv('LOGO_BASE_URL', f'{APPS_CONFIG_BASE_URL}/ui/logos/chains/generated/').strip()
    if not logo_base_url.endswith('/'):
        logo_base_url += '/'

    return Settings(
        app_name=os.getenv('APP_NAME', 'relay-chain-registry-api'),
        environment=environment,  # type: ignore[arg-type]
        cors_origins=os.getenv('CORS_ORIGINS', 'http://localhost:3000'),
        polkadot_source_url=os.getenv(
            'POLKADOT_SOURCE_URL',
            f'{APPS_CONFIG_BASE_URL}/endpoints/productionRelayPolkadot.ts'
        ),
        kusama_source_url=os.getenv(
            'KUSAMA_SOURCE_URL',
            f'{APPS_CONFIG_BASE_URL}/endpoints/productionRelayKusama.ts'
        ),
        logo_base_url=logo_base_url,
        fetch_timeout_seconds=_env_float('FETCH_TIMEOUT_SECONDS', 10.0),
        secret_api_key=os.getenv('SECRET_API_KEY', '').strip()
    )
