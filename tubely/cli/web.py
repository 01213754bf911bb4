import os
import typing as t

import uvicorn

import tubely.lib.cli as click
from tubely.core import BootConfiguration, di
from tubely.core.config import LoggingSettings, WebSettings
from tubely.web.tubely.main import BOOT_VAR

APP_FACTORY = "tubely.web.tubely:create_app"


class ServeConfig(t.TypedDict):
    host: str
    port: int


def _serve_config(web_cf: WebSettings) -> ServeConfig:
    backend = web_cf.tubely.backend
    return {"host": str(backend.host), "port": backend.port}


@click.group()
def web(): ...


@web.command(name="serve")
@click.option("-w", "--workers", type=click.IntRange(min=1), default=1)
@di.inject
def serve(
    workers: int,
    boot_cf: BootConfiguration = di.Provide["_boot_config"],
    logging_cf: LoggingSettings = di.Provide["config.logging", di.as_(LoggingSettings)],  # noqa: B008
    web_cf: WebSettings = di.Provide["config.web", di.as_(WebSettings)],  # noqa: B008
):
    """Start the web app."""
    os.environ[BOOT_VAR] = boot_cf.model_dump_json()
    uvicorn.run(APP_FACTORY, factory=True, workers=workers, log_config=logging_cf.model_dump(), **_serve_config(web_cf))


@web.command(name="develop")
@di.inject
def develop(
    boot_cf: BootConfiguration = di.Provide["_boot_config"],
    logging_cf: LoggingSettings = di.Provide["config.logging", di.as_(LoggingSettings)],  # noqa: B008
    web_cf: WebSettings = di.Provide["config.web", di.as_(WebSettings)],  # noqa: B008
):
    """Start the web app, reloading on source changes."""
    os.environ[BOOT_VAR] = boot_cf.model_dump_json()
    uvicorn.run(APP_FACTORY, factory=True, reload=True, log_config=logging_cf.model_dump(), **_serve_config(web_cf))
