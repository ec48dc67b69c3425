"""
Cashflow Dashboard - Main FastAPI Application
"""
from fastapi import FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

import httpx
import logging

from app.config import settings
from app.services.woocommerce_service import WooCommerceNotConfigured

logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

from app.api.v1 import cashflow, expenses, employees, refunds, business_settings, webhooks, analytics, statistics, order_item_costs

# Rate limiter instance (shared with route-level decorators)
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[f"{settings.RATE_LIMIT_PER_MINUTE}/minute"],
    enabled=settings.RATE_LIMIT_ENABLED,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    logger.info("Starting up %s...", settings.APP_NAME)
    yield
    # Shutdown
    logger.info("Shutting down...")


app = FastAPI(
    title="Cashflow Dashboard API",
    description="Daily revenue, ad spend, expenses and profitability for small online shops",
    version=settings.APP_VERSION,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan
)

# Attach limiter to app state (required by slowapi)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

# Trusted Host Middleware - reject requests with spoofed Host headers
app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.ALLOWED_HOSTS)

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "Accept", "X-WC-Webhook-Topic"],
)


# Security headers middleware
@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response: Response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["X-XSS-Protection"] = "1; mode=block"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    response.headers["Permissions-Policy"] = "camera=(), microphone=(), geolocation=()"
    return response


# Every error is rendered as {"error": message}
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        location = ".".join(str(part) for part in errors[0].get("loc", ()) if part not in ("body", "query"))
        message = f"Invalid request: {location} {errors[0].get('msg', '')}".strip()
    return JSONResponse(status_code=400, content={"error": message, "details": jsonable_encoder(errors)})


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.exception_handler(WooCommerceNotConfigured)
async def woocommerce_not_configured_handler(request: Request, exc: WooCommerceNotConfigured):
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(httpx.HTTPError)
async def upstream_exception_handler(request: Request, exc: httpx.HTTPError):
    logger.error("WooCommerce request failed on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=502, content={"error": f"WooCommerce request failed: {exc}"})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": str(exc) or exc.__class__.__name__})


# Include routers
app.include_router(cashflow.router, prefix="/api/v1", tags=["Cashflow"])
app.include_router(expenses.router, prefix="/api/v1", tags=["Expenses"])
app.include_router(employees.router, prefix="/api/v1", tags=["Employees"])
app.include_router(refunds.router, prefix="/api/v1", tags=["Refunds"])
app.include_router(order_item_costs.router, prefix="/api/v1", tags=["Order Item Costs"])
app.include_router(business_settings.router, prefix="/api/v1", tags=["Business Settings"])
app.include_router(webhooks.router, prefix="/api/v1", tags=["Webhooks"])
app.include_router(analytics.router, prefix="/api/v1", tags=["Analytics"])
app.include_router(statistics.router, prefix="/api/v1", tags=["Statistics"])


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}
