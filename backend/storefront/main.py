import logging
import os
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from storefront.config import settings
from storefront.core.exceptions import ServiceError, RateLimitExceededError
from storefront.core.logger import setup_logging
from storefront.core.redis import close_redis
from storefront.routers import wallets, transactions, discord_wallets

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.LOG_LEVEL)
    logger.info("Storefront wallet API starting")
    yield
    await close_redis()

app = FastAPI(title="Storefront Wallet API", lifespan=lifespan)

_cors_origins_env = os.environ.get("CORS_ORIGINS", "")
_allowed_origins = [o.strip() for o in _cors_origins_env.split(",") if o.strip()] or ["http://localhost:3000"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    headers = None
    if isinstance(exc, RateLimitExceededError):
        headers = {"Retry-After": str(exc.retry_after)}
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.kind, "message": exc.message},
        headers=headers,
    )

app.include_router(wallets.router)
app.include_router(transactions.router)
app.include_router(discord_wallets.router)

@app.get("/health")
async def health():
    return {"status": "ok"}
