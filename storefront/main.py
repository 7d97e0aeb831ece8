import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.cache import cache
from storefront.config import settings
from storefront.database import init_models
from storefront.exceptions import StorefrontError
from storefront.middleware import TimingMiddleware
from storefront.routers import auth, cart, items, metrics, users

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.APP_ENV == "local":
        await init_models()
    # The shop works without Redis; CacheManager degrades to a no-op.
    await cache.connect()
    yield
    await cache.disconnect()


app = FastAPI(
    title="Storefront API",
    description="Items, cart and accounts for a small online shop",
    version="1.0.0",
    lifespan=lifespan,
)

# Middleware
app.add_middleware(TimingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    # Session cookies must travel with cross-origin requests from the frontend.
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    logger.debug("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Routers
app.include_router(auth.router)
app.include_router(items.router)
app.include_router(cart.router)
app.include_router(users.router)
app.include_router(metrics.router)


@app.get("/health")
async def health():
    return {"status": "healthy", "version": "1.0.0"}
