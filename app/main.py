import os
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.config import get_settings
from app.database import engine, Base
from app.models import brand, product, session  # noqa: F401  (register tables)
from app.api import auth, brands, catalog, health, products
from app.services.auth_service import SessionEvents

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def log_session_change(event: str, email: str) -> None:
    logger.info(f"Session change: {event} ({email})")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    # Startup
    logger.info("Starting up application...")

    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created successfully")

    app.state.session_events = SessionEvents()
    unsubscribe = app.state.session_events.subscribe(log_session_change)

    yield

    # Shutdown
    unsubscribe()
    logger.info("Shutting down application...")


app = FastAPI(
    title=settings.APP_NAME,
    description="""
    Product catalog with an admin dashboard backend.

    - **Products**: create, edit, delete, toggle availability, upload an image
    - **Catalog**: public read-only list of available products grouped by category
    - **Auth**: admin sign in / sign out with bearer tokens

    ## Product codes
    New products get a code from their category: the first three letters,
    upper-cased, plus the count of products already in that category plus
    one, zero-padded (e.g. `SHI003`). Codes are derived from the product list
    at save time and are not reserved, so concurrent saves in one category
    can produce the same code.
    """,
    version=settings.APP_VERSION,
    license_info={
        "name": "MIT",
        "url": "https://opensource.org/licenses/MIT"
    },
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(health.router, prefix="/api/v1")
app.include_router(auth.router, prefix="/api/v1")
app.include_router(products.router, prefix="/api/v1")
app.include_router(brands.router, prefix="/api/v1")
app.include_router(catalog.router, prefix="/api/v1")

# Uploaded product images
os.makedirs(settings.STORAGE_DIR, exist_ok=True)
app.mount(settings.PUBLIC_STORAGE_URL, StaticFiles(directory=settings.STORAGE_DIR), name="media")


@app.get("/", tags=["Root"])
def root():
    """Root endpoint with API information."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "redoc": "/redoc",
        "health": "/api/v1/health",
        "catalog": "/api/v1/catalog"
    }
