from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from core.auth import auth_backend, cookie_backend, fastapi_users
from core.config import settings
from core.logging import add_context, clear_context, configure_logging, get_logger
from db.database import Database
from ledger import MovementEngine
from routers.inventory import router as inventory_router
from routers.locations import router as locations_router
from routers.movements import router as movements_router
from routers.products import router as products_router
from schemas.users import UserCreate, UserRead, UserUpdate

logger = get_logger(__name__)


def create_app(database_url: Optional[str] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database = Database(database_url or settings.database_url, echo=settings.database_echo)
        await database.create_all()
        app.state.database = database
        app.state.movement_engine = MovementEngine(
            database.session_maker,
            timeout=settings.movement_timeout_seconds,
        )
        logger.info("storage connected", url=database.engine.url.render_as_string(hide_password=True))
        yield
        await database.dispose()
        logger.info("storage disposed")

    app = FastAPI(
        title="Stock Ledger API",
        description="API for tracking stock levels and movements across locations",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def bind_request_context(request: Request, call_next):
        clear_context()
        add_context(method=request.method, path=request.url.path)
        return await call_next(request)

    # Authentication routes (fastapi-users)
    app.include_router(fastapi_users.get_auth_router(auth_backend), prefix="/auth/jwt", tags=["auth"])
    app.include_router(fastapi_users.get_auth_router(cookie_backend), prefix="/auth/cookie", tags=["auth"])
    app.include_router(fastapi_users.get_register_router(UserRead, UserCreate), prefix="/auth", tags=["auth"])
    app.include_router(fastapi_users.get_reset_password_router(), prefix="/auth", tags=["auth"])
    app.include_router(fastapi_users.get_users_router(UserRead, UserUpdate), prefix="/users", tags=["users"])

    # Catalog
    app.include_router(products_router, prefix="/products", tags=["products"])
    app.include_router(locations_router, prefix="/locations", tags=["locations"])

    # Ledger
    app.include_router(movements_router, prefix="/movements", tags=["movements"])
    app.include_router(inventory_router, tags=["inventory"])

    @app.get("/health", tags=["health"])
    async def health():
        return {"status": "ok"}

    return app


configure_logging()
app = create_app()

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
