"""FastAPI application for compiling visual bot programs."""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.fsm.registries import STATEMENT_RULES, VALUE_RULES
from src.routes import compile as compile_routes

# Load environment variables
env_path = Path(__file__).parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown events."""
    # Startup
    logger.info("Starting Bot Program Compiler Service...")
    logger.info(
        f"Loaded {len(VALUE_RULES)} value rules and {len(STATEMENT_RULES)} statement rules"
    )
    logger.info(f"Accepting compile requests on port {os.getenv('PORT', '8080')}")
    yield
    # Shutdown
    logger.info("Shutting down Bot Program Compiler Service...")


# Create FastAPI app
app = FastAPI(
    title="Bot Program Compiler",
    description="Compiles visual bot programs to state-machine descriptors",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS
cors_origins = os.getenv("CORS_ORIGINS", "*").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(compile_routes.router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8080")))
