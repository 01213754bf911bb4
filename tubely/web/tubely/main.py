"""Main entry point for the Tubely web application."""

import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

import tubely
from tubely.core import BootConfiguration, di, TubelyContainer
from tubely.core.config.web import TubelyWebSettings
from tubely.errors import TubelyError, Unauthenticated
from tubely.storage.object import LocalObjectStore, ObjectStore

from .route import router

BOOT_VAR = "__Tubely_BOOT"


def handle_tubely_error(request: Request, exc: TubelyError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail, "code": exc.code}, headers=headers)


@di.inject
def _create_app(
    config: TubelyWebSettings = di.Provide["config.web.tubely", di.as_(TubelyWebSettings)],
    object_store: ObjectStore = di.Provide["storage.object"],
) -> FastAPI:
    app = FastAPI(
        title="Tubely",
        description="Video upload and publishing",
        version=tubely.__version__,
    )

    if config.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_exception_handler(TubelyError, handle_tubely_error)  # pyright: ignore[reportArgumentType]
    app.include_router(router)

    # the local store's objects are served by the app itself
    if isinstance(object_store, LocalObjectStore) and object_store.url_prefix.startswith("/"):
        app.mount(object_store.url_prefix, StaticFiles(directory=object_store.base_path), name="assets")
    return app


def create_app() -> FastAPI:
    """Factory function for uvicorn."""
    boot_vars = os.getenv(BOOT_VAR)
    if boot_vars:
        boot_cf = BootConfiguration.model_validate_json(boot_vars)
        ct = TubelyContainer()
        TubelyContainer.boot(ct, **dict(boot_cf))
        return _create_app(config=TubelyWebSettings(**ct.config.web.tubely()), object_store=ct.storage.object())
    return _create_app()
