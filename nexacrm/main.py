# NexaCRM backend entrypoint: FastAPI app with every router mounted under /api.

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from nexacrm.api import admin, auth, files, leads, notes, social, tasks, tickets
from nexacrm.core.errors import register_exception_handlers
from nexacrm.core.logging_config import configure_logging
from nexacrm.core.settings import get_settings
from nexacrm.db.session import dispose_engine, init_db
from nexacrm.services.file_storage import upload_dir

logger = logging.getLogger(__name__)

settings = get_settings()
app = FastAPI(title=settings.app_name, version=settings.api_version)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_exception_handlers(app)

API_PREFIX = "/api"

app.include_router(auth.router, prefix=API_PREFIX)
app.include_router(leads.router, prefix=API_PREFIX)
app.include_router(notes.router, prefix=API_PREFIX)
app.include_router(tasks.router, prefix=API_PREFIX)
app.include_router(files.router, prefix=API_PREFIX)
app.include_router(social.router, prefix=API_PREFIX)
app.include_router(tickets.router, prefix=API_PREFIX)
app.include_router(admin.router, prefix=API_PREFIX)


@app.get("/")
def read_root():
    return {"app": "NexaCRM backend", "status": "ok"}


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.on_event("startup")
def on_startup():
    configure_logging(settings.log_level)
    init_db()
    upload_dir()
    logger.info("%s started (%s)", settings.app_name, settings.environment)


@app.on_event("shutdown")
def on_shutdown():
    dispose_engine()
    logger.info("%s stopped", settings.app_name)
