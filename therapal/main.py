import logging
from contextlib import asynccontextmanager
from datetime import datetime

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

# Load environment variables as early as possible
load_dotenv()

from .config import settings
from .database import create_db_and_tables
from .exceptions import DomainError, domain_exception_handler, http_exception_handler
from .middleware import ErrorHandlingMiddleware, LoggingMiddleware, SecurityMiddleware
from .application.ports.change_feed import ChangeFeed
from .infrastructure.realtime.memory_change_feed import InMemoryChangeFeed
from .infrastructure.realtime.redis_change_feed import RedisChangeFeed
from .routers import admin_router, appointments_router, chat_router, doctors_router, profiles_router

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format=settings.LOG_FORMAT
)
logger = logging.getLogger(__name__)


def build_change_feed() -> ChangeFeed:
    if settings.REDIS_URL:
        logger.info("Using Redis change feed")
        return RedisChangeFeed(settings.REDIS_URL, prefix=settings.REDIS_CHANNEL_PREFIX)
    logger.info("Using in-process change feed")
    return InMemoryChangeFeed()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.APP_NAME}...")
    app.state.db_init_ok = True
    app.state.db_init_error = None
    try:
        create_db_and_tables()
    except Exception as e:
        # keep serving; /health reports the failure
        app.state.db_init_ok = False
        app.state.db_init_error = str(e)
        logger.exception("Database initialization failed")
    if not settings.IREMBOPAY_SECRET_KEY:
        logger.warning("IREMBOPAY_SECRET_KEY not set; bookings will be created without payment invoices")
    yield
    logger.info(f"Shutting down {settings.APP_NAME}...")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
    docs_url=("/docs" if settings.DOCS_ENABLED else None),
    redoc_url=("/redoc" if settings.DOCS_ENABLED else None),
    openapi_url=("/openapi.json" if settings.DOCS_ENABLED else None),
)
app.state.change_feed = build_change_feed()

app.add_exception_handler(DomainError, domain_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)

app.add_middleware(ErrorHandlingMiddleware)
app.add_middleware(LoggingMiddleware)
app.add_middleware(SecurityMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(profiles_router.router)
app.include_router(doctors_router.router)
app.include_router(appointments_router.router)
app.include_router(chat_router.router)
app.include_router(admin_router.router)


@app.get("/health")
def health_check():
    return {
        "status": "healthy" if getattr(app.state, "db_init_ok", True) else "degraded",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": datetime.utcnow().isoformat(),
        "database_error": getattr(app.state, "db_init_error", None),
    }
