"""
Storefront Application

Product catalog, per-session shopping cart and checkout in front of a
remote product directory and order API.
"""

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load environment variables before settings are read
load_dotenv()

from .core.config import settings  # noqa: E402
from .core.session import session_manager  # noqa: E402
from .routes import cart_router, checkout_router, products_router  # noqa: E402
from .routes.dependencies import close_api_client  # noqa: E402

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

SESSION_CLEANUP_INTERVAL = 3600


async def _expire_sessions() -> None:
    """Drop idle sessions (and their carts) once an hour"""
    while True:
        await asyncio.sleep(SESSION_CLEANUP_INTERVAL)
        removed = session_manager.cleanup_old_sessions(settings.session_max_age_hours)
        if removed:
            logger.info(f"Expired {removed} idle sessions")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Storefront starting up...")
    logger.info(f"API base URL: {settings.api_base_url}")
    cleanup_task = asyncio.create_task(_expire_sessions())

    yield

    logger.info("Storefront shutting down...")
    cleanup_task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await cleanup_task
    await close_api_client()


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Product catalog, cart and checkout",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Session-ID"],
)

# Include API routers
app.include_router(products_router)
app.include_router(cart_router)
app.include_router(checkout_router)


@app.get("/")
async def home():
    """Service index"""
    return {
        "message": f"{settings.app_name} API",
        "docs": "/docs",
        "endpoints": {
            "products": "/api/products",
            "cart": "/api/cart",
            "checkout": "/api/checkout",
        },
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "storefront",
        "api_configured": bool(settings.api_base_url),
        "active_sessions": len(session_manager.sessions),
    }


def run() -> None:
    import uvicorn

    uvicorn.run(
        "storefront.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
