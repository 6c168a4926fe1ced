"""
User Registry API Server
CRUD for users with optimistic-concurrency PUT semantics
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import ALLOWED_ORIGINS, LOG_LEVEL
from database.connection import init_database, close_database
from database.user_repository import PostgresUserRepository, UserRepository
from api.routes import home, users
from utils.error_handling import setup_error_handling

# Configure logging
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    if getattr(app.state, "user_repository", None) is not None:
        # A store was supplied by the caller; nothing to open or close
        yield
        return

    db_pool = await init_database()
    app.state.user_repository = PostgresUserRepository(db_pool)
    try:
        yield
    finally:
        app.state.user_repository = None
        await close_database(db_pool)


def create_app(repository: Optional[UserRepository] = None) -> FastAPI:
    """Build the application, optionally around an already constructed store"""
    app = FastAPI(
        title="User Registry",
        description="User CRUD with optimistic-concurrency upserts",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.user_repository = repository

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    setup_error_handling(app)

    app.include_router(home.router, tags=["Home"])
    app.include_router(users.router, prefix="/users", tags=["Users"])

    return app


# FastAPI app instance is exported for use by uvicorn
# Server startup is handled by main.py at the project root
app = create_app()
