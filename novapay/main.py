"""
NovaPay — FastAPI application entry point.

Configures the app, middleware, the rate catalog cache, and registers all
API routers.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from novapay.config import settings
from novapay.api import admin, currencies, rates, recipients, transactions
from novapay.services.rate_catalog import RateCatalogCache


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    from novapay.database import engine
    from novapay.redis_client import redis

    yield

    await engine.dispose()
    await redis.aclose()


app = FastAPI(
    title=settings.APP_NAME,
    description="Cross-currency money transfers with operator-managed FX rates.",
    version="0.1.0",
    lifespan=lifespan,
)

# The rate catalog cache belongs to the application, not to the FX engine.
app.state.rate_cache = RateCatalogCache(ttl_seconds=settings.RATE_CACHE_TTL_SECONDS)

# --- CORS Middleware ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Routers ---
app.include_router(currencies.router, prefix="/api/v1/currencies", tags=["Currencies"])
app.include_router(rates.router, prefix="/api/v1/rates", tags=["Rates"])
app.include_router(recipients.router, prefix="/api/v1/recipients", tags=["Recipients"])
app.include_router(transactions.router, prefix="/api/v1/transactions", tags=["Transactions"])
app.include_router(admin.router, prefix="/api/v1/admin", tags=["Admin"])


@app.get("/health")
async def health_check():
    """Health check endpoint for load balancers and monitoring."""
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": "0.1.0",
    }
