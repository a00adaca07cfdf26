"""Main FastAPI application."""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from backoffice.config import settings
from backoffice.errors import register_exception_handlers
from backoffice.middlewares.requestLoggingMiddleware import RequestLoggingMiddleware
from backoffice.routes.auth import router as auth_router
from backoffice.routes.categories import router as categories_router
from backoffice.routes.products import router as products_router
from backoffice.routes.orders import router as orders_router
from backoffice.routes.users import router as users_router
from backoffice.routes.dashboard import router as dashboard_router
from backoffice.data.database.connection import engine, Base
# Import models to ensure tables are created
from backoffice.data.database import product_model, user_model, order_models  # noqa: F401

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Create database tables
Base.metadata.create_all(bind=engine)

# Initialize FastAPI app
app = FastAPI(
    title=settings.project_name,
    version=settings.api_version,
    description="Back-office API: catalog, stock, point-of-sale orders and user roles"
)

register_exception_handlers(app)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

# Include routers
app.include_router(auth_router)
app.include_router(categories_router)
app.include_router(products_router)
app.include_router(orders_router)
app.include_router(users_router)
app.include_router(dashboard_router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Backoffice API",
        "version": settings.api_version,
        "docs": "/docs"
    }


@app.head("/health")
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
