import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from scholarstream import analytics, applications, payments, reviews, scholarships, users
from scholarstream.config import Settings
from scholarstream.database import Database
from scholarstream.errors import register_error_handlers

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    logging.basicConfig(level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database = Database(settings.database_url)
        database.create_all()
        app.state.database = database
        logger.info("Connected to %s", database.engine.url.render_as_string(hide_password=True))
        yield
        database.dispose()

    app = FastAPI(title="ScholarStream API", lifespan=lifespan)
    app.state.settings = settings

    register_error_handlers(app)

    for module in (users, scholarships, reviews, applications, payments, analytics):
        app.include_router(module.router)

    @app.get("/", response_class=PlainTextResponse)
    def root():
        return "scholarstream-server is running"

    return app


app = create_app()
