import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from app.config import get_settings
from app.api.routes import messages, workspace
from app.services.orchestrator import WorkspaceOrchestrator

settings = get_settings()

# Configure application logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

# Set log level for app modules
logger = logging.getLogger("app")
logger.setLevel(logging.DEBUG if settings.debug else logging.INFO)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Initialize the client when a token is configured in the environment
    if settings.graph_access_token:
        result = await app.state.orchestrator.authorize(settings.graph_access_token)
        logger.info(result.message)
    yield


app = FastAPI(
    title=settings.app_name,
    description="Private team, channel and message orchestration over Microsoft Graph",
    version="0.1.0",
    lifespan=lifespan,
)
app.state.orchestrator = WorkspaceOrchestrator(settings)

# Include routers
app.include_router(workspace.router, prefix="/api", tags=["Workspace"])
app.include_router(messages.router, prefix="/api/messages", tags=["Messages"])


@app.get("/")
async def root():
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": "0.1.0",
        "endpoints": {
            "workspace": "/api",
            "messages": "/api/messages",
            "health": "/health",
            "docs": "/docs",
            "redoc": "/redoc",
        },
    }


@app.get("/health")
async def health_check():
    orchestrator = app.state.orchestrator
    return {
        "status": "healthy",
        "service": settings.app_name,
        "client_initialized": orchestrator.client is not None,
        "team_id": orchestrator.team_id,
    }
