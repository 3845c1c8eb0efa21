"""FastAPI application entrypoint for the bio engine."""

from __future__ import annotations

import argparse
import logging
import time
from typing import Sequence

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api import ServiceRegistry, configure_services, get_services, router as api_router
from .api.routes import services
from .api.schemas import ErrorPayload, HealthResponse
from .config import DEFAULT_SERVER_CONFIG, DEFAULT_TELEMETRY_CONFIG, ServerConfig, parse_address
from .telemetry import configure_telemetry

LOGGER = logging.getLogger(__name__)


API_DESCRIPTION = """
The bio engine returns deterministic, synthetic computational-chemistry
results.  Every number is derived from a content hash of the submitted text,
so identical requests always produce identical results.  The service exposes
endpoints to:

* run a molecular simulation (`/simulate`)
* virtually screen a compound library against a target (`/screen`)
* predict structure confidence and domains for a sequence (`/predict`)
* break down force-field energy terms (`/energy`)
* read process-wide usage counters (`/stats`)

Results carry no physical meaning.
"""


def configure_logging(level: str = "info") -> None:
    """Attach a stream handler to the ``bio_engine`` logger hierarchy."""

    logger = logging.getLogger("bio_engine")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(handler)


def create_app(
    config: ServerConfig = DEFAULT_SERVER_CONFIG,
    registry: ServiceRegistry | None = None,
) -> FastAPI:
    """Build the FastAPI application for ``config``.

    Each app serves its own :class:`ServiceRegistry`; a fresh one is created
    from ``config`` unless ``registry`` is supplied.
    """

    if registry is None:
        registry = ServiceRegistry(api_prefix=config.api_prefix)
        if config.version:
            registry.version = config.version
    application = FastAPI(title="Bio Engine API", description=API_DESCRIPTION, version=registry.version)
    application.state.services = registry

    allow_any = "*" in config.cors_origins
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_any else list(config.cors_origins),
        allow_credentials=not allow_any,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @application.middleware("http")
    async def trace_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        LOGGER.info(
            "%s %s -> %d (%.2f ms)",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000.0,
        )
        return response

    @application.exception_handler(RequestValidationError)
    async def invalid_payload(request: Request, exc: RequestValidationError) -> JSONResponse:
        payload = ErrorPayload(
            code="invalid_payload",
            message=f"Payload validation failed for '{request.url.path}'.",
            context={"errors": jsonable_encoder(exc.errors())},
        )
        return JSONResponse(status_code=422, content={"detail": payload.model_dump()})

    @application.get("/", response_model=HealthResponse)
    @application.get("/health", response_model=HealthResponse)
    def health(svc: ServiceRegistry = Depends(get_services)) -> HealthResponse:
        """Liveness probe reporting version, uptime and completed operations."""

        counters = svc.usage.snapshot()
        return HealthResponse(
            status="ok",
            version=svc.version,
            uptime_secs=svc.uptime_secs(),
            total_ops=counters.total_ops,
        )

    application.include_router(api_router, prefix=config.api_prefix)
    return application


telemetry = configure_telemetry(DEFAULT_TELEMETRY_CONFIG)

configure_services(api_prefix=DEFAULT_SERVER_CONFIG.api_prefix, version=DEFAULT_SERVER_CONFIG.version)
app = create_app(DEFAULT_SERVER_CONFIG, registry=services)
telemetry.instrument_app(app)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Serve the bio engine API.")
    parser.add_argument(
        "--addr",
        default=None,
        metavar="HOST:PORT",
        help=f"Bind address (default: BIO_ADDR or {DEFAULT_SERVER_CONFIG.address})",
    )
    parser.add_argument("--log-level", default=None, help="Logging level for the bio_engine loggers")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    config = DEFAULT_SERVER_CONFIG
    host, port = (config.host, config.port) if args.addr is None else parse_address(args.addr)
    log_level = (args.log_level or config.log_level).lower()
    configure_logging(log_level)

    import uvicorn

    LOGGER.info("Bio engine listening on %s:%d", host, port)
    if telemetry.enabled:
        LOGGER.info("Exporting telemetry as %s", DEFAULT_TELEMETRY_CONFIG.service_name)
    try:
        uvicorn.run(app, host=host, port=port, log_level=log_level)
    finally:
        telemetry.shutdown()
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())


__all__ = ["app", "configure_logging", "create_app", "main"]
