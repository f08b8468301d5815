"""
Taskhive - multi-tenant project management API with row-level authorization.
"""

from fastapi import FastAPI
from contextlib import asynccontextmanager

from app.database import init_db
from app.routes import comments, dashboard, members, profiles, projects, tasks
from app.exceptions import ERROR_RESPONSES, register_exception_handlers
from app.logging_config import setup_logging, get_logger

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    logger.info("Starting Taskhive API...")
    await init_db()
    logger.info("Database initialized")
    yield
    logger.info("Shutting down Taskhive API...")


app = FastAPI(
    title="Taskhive",
    description="Projects, members, tasks and comments behind row-level security",
    version="0.1.0",
    lifespan=lifespan,
)

# Register custom exception handlers
register_exception_handlers(app)

# Include routers
app.include_router(profiles.account_router, prefix="/account", tags=["Account"], responses=ERROR_RESPONSES)
app.include_router(profiles.router, prefix="/profiles", tags=["Profiles"], responses=ERROR_RESPONSES)
app.include_router(projects.router, prefix="/projects", tags=["Projects"], responses=ERROR_RESPONSES)
app.include_router(members.router, prefix="/projects/{project_id}/members", tags=["Members"], responses=ERROR_RESPONSES)
app.include_router(tasks.router, prefix="/tasks", tags=["Tasks"], responses=ERROR_RESPONSES)
app.include_router(comments.router, prefix="/tasks/{task_id}/comments", tags=["Comments"], responses=ERROR_RESPONSES)
app.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"], responses=ERROR_RESPONSES)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
