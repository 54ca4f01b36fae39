from fastapi import FastAPI

from app.api.routes import api_router
from app.api.v1 import v1_router
from app.api.v1.errors import register_error_handlers
from app.core.config import settings
from app.core.db import engine
from app.core.logging_config import setup_logging
from app.infrastructure.cache.redis_client import close_redis_client
from app.infrastructure.db.base import Base

setup_logging()

app = FastAPI(title=settings.APP_NAME, debug=settings.DEBUG)


@app.on_event("startup")
async def startup():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@app.on_event("shutdown")
async def shutdown():
    await close_redis_client()
    await engine.dispose()


register_error_handlers(app)

app.include_router(api_router)
app.include_router(v1_router)
