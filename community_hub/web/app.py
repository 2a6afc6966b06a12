# web/app.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from community_hub.db.database import DataBase
from community_hub.web.middlewares.profile import ProfileMiddleware
from community_hub.web.routers.webhooks import router as WebhookRouter
from community_hub.web.routers.profile import router as ProfileRouter
from community_hub.web.routers.admin_users import router as AdminUserRouter

logging.basicConfig(level=logging.INFO)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    await DataBase().create_all()
    yield
    await DataBase().dispose()


def setup_middlewares(app: FastAPI) -> None:
    app.add_middleware(ProfileMiddleware)

def setup_routers(app: FastAPI) -> None:
    app.include_router(WebhookRouter)
    app.include_router(ProfileRouter)
    app.include_router(AdminUserRouter)

def create_app() -> FastAPI:
    app = FastAPI(title="community_hub", lifespan=lifespan)
    setup_middlewares(app)
    setup_routers(app)
    return app


def main() -> None:
    import uvicorn

    uvicorn.run(create_app(), host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
