from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
import logging

# Import database components
from app.database.database import sync_engine, Base

# Import middleware
from app.common.middleware import RequestTimingMiddleware, SecurityHeadersMiddleware

# Import routers
from app.modules.cart.router import cart_router
from app.modules.menu.router import menu_router
from app.modules.orders.router import orders_router
from app.modules.credits.router import credits_router
from app.modules.employees.router import employees_router
from app.modules.expenses.router import expenses_router
from app.modules.balance.router import balance_router

# Import models for table creation
import app.modules.menu.models
import app.modules.employees.models
import app.modules.credits.models
import app.modules.orders.models
import app.modules.expenses.models

from app.core.config import settings

# Configure logging
logging.basicConfig(
    level=logging.INFO if settings.ENVIRONMENT == "production" else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Back-office de Savia: menú, órdenes con pagos mixtos, crédito de empleados, horarios y balance",
    version="1.0.0",
    docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None
)

# Add middleware (order matters!)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestTimingMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(menu_router, prefix="/api/v1")
app.include_router(cart_router, prefix="/api/v1")
app.include_router(orders_router, prefix="/api/v1")
app.include_router(credits_router, prefix="/api/v1")
app.include_router(employees_router, prefix="/api/v1")
app.include_router(expenses_router, prefix="/api/v1")
app.include_router(balance_router, prefix="/api/v1")

# Create database tables (use migrations in production)
if settings.ENVIRONMENT != "production":
    Base.metadata.create_all(bind=sync_engine)

@app.get("/")
async def read_root():
    return {
        "message": f"{settings.APP_NAME} is running",
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT
    }

@app.get("/health")
async def health_check():
    return {"status": "healthy", "environment": settings.ENVIRONMENT}

@app.on_event("startup")
async def startup_event():
    logger.info(f"{settings.APP_NAME} starting up...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug mode: {settings.DEBUG}")
    logger.info(f"Currency: {settings.CURRENCY}")

@app.on_event("shutdown")
async def shutdown_event():
    logger.info(f"{settings.APP_NAME} shutting down...")
