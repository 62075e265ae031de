import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv

load_dotenv()

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import Response

from app.relay.config import RelayConfig, load_config
from app.relay.handler import WeatherProxy

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def _validate_config(config: RelayConfig) -> None:
    """Warn about config that leaves the relay unusable."""
    missing = []
    if not config.api_key:
        missing.append("WB_KEY")
    if not config.allowed_origins and not config.debug:
        missing.append("ALLOWED_ORIGINS (every request will be rejected)")
    if missing:
        logger.warning("Missing config: %s", ", ".join(missing))
    if config.debug:
        logger.warning("RELAY_DEBUG is on; origin whitelist is not enforced")


def create_app(
    config: RelayConfig | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        cfg = config or load_config()
        _validate_config(cfg)
        _app.state.proxy = WeatherProxy(cfg, transport=transport)
        logger.info(
            "Relay ready: %d endpoints, %d allowed origins, cache ttl %ds",
            len(_app.state.proxy.endpoints), len(cfg.allowed_origins), cfg.cache_ttl,
        )
        yield

    app = FastAPI(title="Weather Relay", lifespan=lifespan)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.get("/")
    async def relay(request: Request):
        proxy: WeatherProxy = request.app.state.proxy
        result = await proxy.handle(request.headers.get("origin"), request.url.query)
        return Response(
            content=result.body,
            status_code=result.status_code,
            headers=result.headers,
        )

    return app


app = create_app()
