import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, APIRouter, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bankimport.core.config import settings
from bankimport.api.v1 import bank
from bankimport.services.bank.parsers import DIALECTS

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan events.
    
    Startup:
    - Log the registered dialects and bank routes for diagnostics
    """
    logger.info(f"Registered CSV dialects: {sorted(f.value for f in DIALECTS)}")
    bank_routes = [route.path for route in bank.router.routes]
    logger.info("Router mount confirmed: /api/v1/bank, routes=%s", bank_routes)
    
    yield
    
    logger.info("Application shutdown complete")


app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS middleware - must be added FIRST to ensure headers on all responses including errors
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler to ensure JSON responses with proper CORS headers.
    
    HTTPException is handled by FastAPI's default handler and will
    not reach this handler, preserving intended status codes.
    """
    logger.exception(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
        },
    )

# API v1 router
api_v1_router = APIRouter(prefix="/api/v1")
api_v1_router.include_router(bank.router, tags=["bank-import"])

app.include_router(api_v1_router)


@app.get("/health")
async def health_check():
    """
    Health check endpoint.
    
    The service is stateless, so it is healthy whenever it answers.
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.ENV,
    }


@app.get("/")
async def root():
    return {
        "message": "Bank Statement Import API",
        "version": "1.0.0",
        "docs": "/docs",
    }
