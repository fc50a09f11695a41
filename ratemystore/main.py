import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ratemystore.core.config import settings
from ratemystore.core.logging import setup_logging
from ratemystore.db.base import Base
from ratemystore.db.session import engine, test_connection
from ratemystore.middleware.auth_middleware import AuthMiddleware
from ratemystore.model import rating, store, user  # noqa: F401  (register tables)
from ratemystore.routers.admin_router import router as admin_router
from ratemystore.routers.error_handlers import register_error_handlers
from ratemystore.routers.health_router import router as health_router
from ratemystore.routers.rating_router import router as rating_router
from ratemystore.routers.store_owner_router import router as store_owner_router
from ratemystore.routers.store_router import router as store_router
from ratemystore.routers.user_router import router as user_router

logger = logging.getLogger(__name__)

API_PREFIX = "/v1/api"


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
    if test_connection() and settings.AUTO_CREATE_TABLES:
        Base.metadata.create_all(bind=engine)
    logger.info("Rate My Store API started")
    yield
    logger.info("Rate My Store API shutting down")


app = FastAPI(title="Rate My Store API", version="0.1.0", lifespan=lifespan)

app.add_middleware(AuthMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

register_error_handlers(app)

app.include_router(health_router)
app.include_router(user_router, prefix=API_PREFIX)
app.include_router(store_owner_router, prefix=API_PREFIX)
app.include_router(admin_router, prefix=API_PREFIX)
app.include_router(store_router, prefix=API_PREFIX)
app.include_router(rating_router, prefix=API_PREFIX)


def serve():
    uvicorn.run("ratemystore.main:app", host=settings.APP_HOST, port=settings.APP_PORT)
