import logging
from contextlib import asynccontextmanager

from aiokafka import AIOKafkaProducer
from aiokafka.errors import KafkaError
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from prometheus_client import make_asgi_app
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront import models  # noqa: F401  registers tables on Base.metadata
from storefront.config import settings
from storefront.database import Base, engine
from storefront.errors import StorefrontError
from storefront.middleware.metrics import MetricsMiddleware
from storefront.middleware.request_id import RequestIDMiddleware
from storefront.routers import auth, menu, orders, reservations
from storefront.services.cache import RedisCache
from storefront.services.menu_service import seed_menu
from storefront.utils.logging import setup_logging
from storefront.utils.tracing import setup_tracing

setup_logging(settings.log_level)
logger = logging.getLogger(__name__)

setup_tracing("storefront", settings.otlp_endpoint)


async def _connect_cache() -> RedisCache | None:
    if not settings.redis_url:
        logger.info("Menu cache disabled (no REDIS_URL)")
        return None
    cache = RedisCache.from_url(settings.redis_url, settings.redis_socket_timeout)
    if not await cache.ping():
        # The cache is optional; serve straight from the database
        logger.warning("Redis unreachable at startup, menu cache disabled")
        await cache.close()
        return None
    logger.info("Menu cache connected")
    return cache


async def _start_producer() -> AIOKafkaProducer | None:
    if not settings.kafka_bootstrap_servers:
        logger.info("Event publishing disabled (no KAFKA_BOOTSTRAP_SERVERS)")
        return None
    producer = AIOKafkaProducer(
        bootstrap_servers=settings.kafka_bootstrap_servers,
        enable_idempotence=True,
    )
    try:
        await producer.start()
    except KafkaError as exc:
        logger.warning("Kafka unavailable, event publishing disabled", extra={"error": str(exc)})
        await producer.stop()
        return None
    return producer


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting up, creating database tables")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine)

    if settings.seed_menu:
        await seed_menu()

    app.state.menu_cache = await _connect_cache()
    app.state.kafka_producer = await _start_producer()
    logger.info("Startup complete")

    yield

    if app.state.kafka_producer is not None:
        await app.state.kafka_producer.stop()
    if app.state.menu_cache is not None:
        await app.state.menu_cache.close()
    await engine.dispose()
    logger.info("Shutting down")


app = FastAPI(
    title="Restaurant Storefront",
    description="Menu, delivery orders and table reservations",
    version="1.0.0",
    lifespan=lifespan,
)

FastAPIInstrumentor.instrument_app(app)
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestIDMiddleware)
app.include_router(menu.router, prefix="/menu", tags=["menu"])
app.include_router(orders.router, prefix="/orders", tags=["orders"])
app.include_router(reservations.router, prefix="/reservations", tags=["reservations"])
app.include_router(auth.router, prefix="/auth", tags=["auth"])

# Expose Prometheus metrics at /metrics
metrics_app = make_asgi_app()
app.mount("/metrics", metrics_app)


# ---------------------------------------------------------------------------
# Error payloads: every failure is {"error": message}
# ---------------------------------------------------------------------------


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(part) for part in err["loc"] if part != "body"),
            "message": err["msg"],
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Validation failed", "details": details},
    )


@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code, content={"error": exc.message}, headers=headers
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(
        "Database error",
        exc_info=exc,
        extra={"request_id": getattr(request.state, "request_id", "unknown")},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled error",
        exc_info=exc,
        extra={"request_id": getattr(request.state, "request_id", "unknown")},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


@app.get("/health", tags=["health"])
async def health():
    return {"status": "ok"}
