import logging
import os

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse

from ..errors import SchemaNotFound, StorageException
from ..store import SchemaStore
from .routes import color_schemes, schemas, templates

logger = logging.getLogger(__name__)


def create_app(config_obj=None) -> FastAPI:
    from ..config import Config
    from ..db import close_db, create_tables, init_db

    if config_obj is None:
        config_obj = Config.load(os.environ.get("CONFIG_FILE"))

    app = FastAPI(title="Promptor API")

    app.state.config = config_obj
    app.state.timezone = config_obj.get_timezone()
    app.state.store = SchemaStore()

    db_path = os.environ.get("PROMPTOR_DB_PATH", config_obj.database.path)
    init_db(db_path)
    create_tables()

    api_router = APIRouter(prefix="/api/v1")
    api_router.include_router(schemas.router)
    api_router.include_router(templates.router)
    api_router.include_router(color_schemes.router)
    app.include_router(api_router)

    @app.exception_handler(SchemaNotFound)
    def schema_not_found(request: Request, exc: SchemaNotFound):
        return JSONResponse(status_code=404, content={"detail": "Schema not found"})

    @app.exception_handler(StorageException)
    def storage_failed(request: Request, exc: StorageException):
        logger.error(f"Storage error on {request.url.path}: {exc}")
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.on_event("shutdown")
    def shutdown_db():
        close_db()

    return app
