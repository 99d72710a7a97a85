from __future__ import annotations

import logging
from typing import Callable

import httpx
from fastapi import FastAPI, Header, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from prometheus_client import Counter, make_asgi_app
from pydantic import BaseModel

from .chain_registry import get_chain_registry
from .config import Settings, get_settings
from .errors import ChainRegistryError, Unauthorized
from .notifications import bearer_matches, record_change_notification

logger = logging.getLogger(__name__)

REGISTRY_BUILDS_TOTAL = Counter(
    'chain_registry_builds_total',
    'Chain registry builds served by the API',
    ['outcome']
)
CHANGE_NOTIFICATIONS_TOTAL = Counter(
    'chain_registry_change_notifications_total',
    'Upstream file change notifications received',
    ['outcome']
)


class FileChangedRequest(BaseModel):
    diff: str


def create_app(
    settings: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    change_recorder: Callable[[str], None] | None = None
) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(title=settings.app_name, default_response_class=ORJSONResponse)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[x.strip() for x in settings.cors_origins.split(',') if x.strip()],
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*']
    )
    app.mount('/metrics', make_asgi_app())
    app.state.settings = settings
    app.state.http_client = None

    @app.on_event('startup')
    async def startup() -> None:
        app.state.http_client = httpx.AsyncClient(
            timeout=settings.fetch_timeout_seconds,
            transport=transport
        )

    @app.on_event('shutdown')
    async def shutdown() -> None:
        if app.state.http_client is not None:
            await app.state.http_client.aclose()
            app.state.http_client = None

    @app.get('/health')
    async def health() -> dict[str, str]:
        return {'status': 'ok'}

    @app.get('/chains')
    async def chains(network: str | None = Query(default=None)) -> list[dict]:
        try:
            result = await get_chain_registry(
                network,
                settings=settings,
                client=app.state.http_client
            )
        except ChainRegistryError as exc:
            REGISTRY_BUILDS_TOTAL.labels(outcome='error').inc()
            logger.warning('chain registry build failed: %s', exc.detail)
            raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
        REGISTRY_BUILDS_TOTAL.labels(outcome='ok').inc()
        return [chain.to_dict() for chain in result]

    @app.post('/file-changed')
    async def file_changed(
        body: FileChangedRequest,
        authorization: str | None = Header(default=None)
    ) -> dict[str, str]:
        authorized = bearer_matches(authorization, settings.secret_api_key)
        try:
            result = record_change_notification(body.diff, authorized, recorder=change_recorder)
        except Unauthorized as exc:
            CHANGE_NOTIFICATIONS_TOTAL.labels(outcome='unauthorized').inc()
            raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
        CHANGE_NOTIFICATIONS_TOTAL.labels(outcome='ok').inc()
        return {'result': result}

    return app


app = create_app()
