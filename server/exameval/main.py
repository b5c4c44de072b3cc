import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from exameval.config import settings
from exameval.database import init_db
from exameval.errors import register_error_handlers

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.api_version,
    debug=settings.debug
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)


@app.on_event("startup")
async def startup_event():
    """Create tables and seed sections and practice tests"""
    init_db()

    logger.info("%s is starting...", settings.app_name)
    logger.info("Database: %s", settings.database_url)
    logger.info("Evaluator: %s", settings.evaluator)


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.api_version,
        "status": "running"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}


# Import and include routers
from exameval.routes import auth, events, sections, tests, uploads  # noqa: E402

app.include_router(auth.router, prefix=f"{settings.api_prefix}/auth")
app.include_router(sections.router, prefix=f"{settings.api_prefix}/sections")
app.include_router(tests.router, prefix=f"{settings.api_prefix}/tests")
app.include_router(uploads.router, prefix=f"{settings.api_prefix}/uploads")
app.include_router(uploads.files_router, prefix=f"{settings.api_prefix}/files")
app.include_router(events.router, prefix=f"{settings.api_prefix}/events")
