"""
Storefront Platform - Backend API
Order, inventory and reporting core for the storefront
"""
import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(env_path)

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront.api import checkout, inventory, orders, reports
from storefront.core.config import settings
from storefront.core.database import check_database, init_db

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables on startup (no-op when the schema already exists)"""
    init_db()
    logger.info(f"{settings.API_TITLE} {settings.API_VERSION} started")
    yield


# Crear aplicación FastAPI
app = FastAPI(
    title=settings.API_TITLE,
    version=settings.API_VERSION,
    description=settings.API_DESCRIPTION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    expose_headers=["*"],
)

# Include API routers
app.include_router(checkout.router, prefix="/api/v1/checkout", tags=["Checkout"])
app.include_router(checkout.router, prefix="/api/v1/orders", tags=["Orders"])
app.include_router(orders.router, prefix="/api/v1/orders", tags=["Orders"])
app.include_router(reports.router, prefix="/api/v1/reports", tags=["Reports"])
app.include_router(inventory.router)


@app.get("/")
async def root():
    """Endpoint raíz - Verificación de estado de la API"""
    return {
        "message": settings.API_TITLE,
        "status": "online",
        "version": settings.API_VERSION,
        "description": settings.API_DESCRIPTION
    }


@app.get("/health")
def health():
    """Health check endpoint para monitoreo - tests database connectivity"""
    start_time = time.time()

    database = check_database()

    total_latency_ms = round((time.time() - start_time) * 1000, 2)

    status = "healthy" if database["status"] == "connected" else "degraded"

    return {
        "status": status,
        "service": "storefront-api",
        "version": settings.API_VERSION,
        "database": database,
        "total_latency_ms": total_latency_ms
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("storefront.main:app", host="0.0.0.0", port=8000, reload=True)
