"""FastAPI server for the inventory API.

When ``scheduler.enabled`` is set the periodic reconciliation job runs inside
this process, so a single service handles both the API and reconciliation.
"""

from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .routes import products, reports, stock_in, stock_out, suppliers
from .scheduler import create_background_scheduler
from .store.database import get_database
from .utils.config import get_config
from .utils.dates import utcnow
from .utils.exceptions import BaseAppException
from .utils.logger import get_api_logger, get_error_logger

config = get_config()
logger = get_api_logger()
error_logger = get_error_logger()


# ------------------------------------------------------------------
# Lifespan
# ------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage startup / shutdown of the application."""
    logger.info("=" * 60)
    logger.info("Inventory API Starting")
    logger.info("=" * 60)
    logger.info(f"Environment:          {config.env.environment}")
    logger.info(f"Port:                 {config.env.port}")
    logger.info(f"Admin token required: {config.auth.require_admin_token}")
    logger.info(f"Reconciliation:       {'enabled' if config.scheduler.enabled else 'disabled'}")
    logger.info("=" * 60)

    if config.store.create_tables:
        get_database().create_all()

    scheduler = None
    if config.scheduler.enabled:
        scheduler = create_background_scheduler()
        scheduler.start()
        logger.info("Reconciliation scheduler started")

    yield

    if scheduler is not None:
        logger.info("Shutting down reconciliation scheduler...")
        scheduler.shutdown(wait=True)
    logger.info("Inventory API shut down.")


# ------------------------------------------------------------------
# FastAPI app
# ------------------------------------------------------------------

app = FastAPI(
    title="Inventory API",
    description="Products, suppliers, stock ledgers and reports",
    version="1.0.0",
    lifespan=lifespan,
)

api = APIRouter(prefix="/api")
api.include_router(products.router)
api.include_router(suppliers.router)
api.include_router(stock_in.router)
api.include_router(stock_out.router)
api.include_router(reports.router)
app.include_router(api)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "Inventory API",
        "version": "1.0.0",
        "status": "running"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {
        "status": "healthy",
        "timestamp": utcnow().isoformat(),
        "environment": config.env.environment
    }


# ------------------------------------------------------------------
# Exception handlers
# ------------------------------------------------------------------

def _error_body(message: str, details: dict = None) -> dict:
    body = {"success": False, "message": message}
    if details:
        body["details"] = details
    return body


@app.exception_handler(BaseAppException)
async def app_exception_handler(request: Request, exc: BaseAppException):
    """Application errors carry their own status code."""
    if exc.status_code >= 500:
        error_logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    else:
        logger.warning(f"HTTP {exc.status_code} on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message, exc.details))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Invalid request bodies and parameters: 400 with the first error message."""
    errors = exc.errors()
    message = errors[0]["msg"] if errors else "Invalid request"
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    logger.warning(f"HTTP 400 on {request.url.path}: {message}")
    return JSONResponse(
        status_code=400,
        content=_error_body(message, {"errors": [
            {"field": ".".join(str(part) for part in error["loc"]), "message": error["msg"]}
            for error in errors
        ]})
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Anything else is reported as a bad request with its message."""
    error_logger.error(f"Unhandled exception on {request.url.path}: {str(exc)}", exc_info=True)
    return JSONResponse(status_code=400, content=_error_body(str(exc)))


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.server:app",
        host="0.0.0.0",
        port=config.env.port,
        reload=not config.is_production
    )
