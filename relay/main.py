import asyncio
import logging
import traceback
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from relay.api.chat import router as chat_router
from relay.api.health import router as health_router
from relay.core.config import settings, validate_settings_for_production
from relay.core.dependencies import get_rate_limiter, get_registry
from relay.core.logging import setup_logging
from relay.core.metrics import PrometheusMiddleware
from relay.core.sentry import init_sentry
from relay.gateway.errors import RelayError

# Configure logging before anything else
setup_logging()
init_sentry()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    validate_settings_for_production()
    logger.info("Starting JARVIS relay (env=%s, version=%s)", settings.app_env, settings.app_version)
    get_registry().log_summary()

    reset_task = asyncio.create_task(get_rate_limiter().run_reset_loop())

    yield

    # Shutdown
    reset_task.cancel()
    with suppress(asyncio.CancelledError):
        await reset_task
    logger.info("JARVIS relay shut down")


app = FastAPI(
    title="JARVIS Relay",
    description="Chat relay with priority-ordered failover across upstream LLM providers",
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/api/docs" if settings.app_debug else None,
    redoc_url="/api/redoc" if settings.app_debug else None,
)


@app.exception_handler(RelayError)
async def _relay_error_handler(request: Request, exc: RelayError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def _request_validation_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    detail = first.get("msg", "Malformed request body")
    return JSONResponse(
        status_code=400,
        content={
            "error": "Invalid request",
            "message": f"{location}: {detail}" if location else detail,
        },
    )


# Log unhandled exceptions; the caller only gets a generic body
@app.exception_handler(Exception)
async def _unhandled_exception_handler(request: Request, exc: Exception):
    tb = traceback.format_exception(type(exc), exc, exc.__traceback__)
    logger.error("Unhandled %s on %s %s:\n%s", type(exc).__name__, request.method, request.url.path, "".join(tb))
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "message": "An unexpected error occurred. Please try again.",
        },
    )


app.add_middleware(PrometheusMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(chat_router)
app.include_router(health_router)
