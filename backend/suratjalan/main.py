from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from suratjalan.routers import delivery_notes, purchase_orders, users, permissions
from suratjalan.config import settings
from suratjalan.exceptions import SuratJalanError
import logging
import sys

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

logger = logging.getLogger(__name__)

logger.info("=" * 60)
logger.info(f"Starting {settings.app_name}")
logger.info(f"Reconcile PO balances on every note change: {settings.reconcile_on_every_change}")
logger.info("=" * 60)

# Tables are managed by Alembic migrations (alembic upgrade head)

app = FastAPI(
    title=settings.app_name,
    description="API for delivery notes (surat jalan) and purchase orders",
    version="1.0.0"
)


def parse_cors_origins(origins_str: str) -> list:
    """Parse comma separated CORS origins into a list."""
    return [origin.strip() for origin in origins_str.split(",") if origin.strip()]


app.add_middleware(
    CORSMiddleware,
    allow_origins=parse_cors_origins(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Include routers
app.include_router(delivery_notes.router)
app.include_router(purchase_orders.router)
app.include_router(users.router)
app.include_router(permissions.router)


@app.get("/")
def root():
    return {"message": settings.app_name, "version": "1.0.0"}


@app.get("/health")
def health_check():
    return {"status": "healthy"}


@app.exception_handler(SuratJalanError)
async def surat_jalan_error_handler(request: Request, exc: SuratJalanError):
    """NotFoundError -> 404, ValidationError -> 422, PersistenceError -> 502"""
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": f"Internal server error: {str(exc)}"},
    )
