"""
Cart Backend Application

Stand-in for the hosted document database and auth service behind the
storefront: serves the merchant's cart rules, validates coupons and keeps
each account's cloud cart.
"""

import os
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

from .config import settings
from .database import rule_db
from .routes import auth_router, carts_router, coupons_router, rules_router

# Load environment variables
load_dotenv(os.path.join(os.path.dirname(__file__), "..", "..", "config", ".env"))

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Cart Backend starting up...")
    logger.info(f"Active cart rules: {len(rule_db.list_rules(active_only=True))}")
    logger.info(f"Mock login: {'enabled' if settings.allow_mock_login else 'disabled'}")
    yield
    logger.info("Cart Backend shutting down...")


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Cart rules, coupons and cloud carts for the storefront",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, restrict this
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(auth_router)
app.include_router(rules_router)
app.include_router(coupons_router)
app.include_router(carts_router)


@app.get("/")
async def home():
    """API index"""
    return {
        "message": "Cart Backend API",
        "docs": "/docs",
        "endpoints": {
            "cart_rules": "/api/cart-rules",
            "coupons": "/api/coupons/validate",
            "cart": "/api/users/me/cart",
        },
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "cart-backend"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "cart_backend.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
