import os

import uvicorn

import assessor.lib.cli as click
from assessor.core import BootConfiguration, di
from assessor.core.config import LoggingSettings, WebSettings
from assessor.web.main import BootVariable


@click.group()
def web(): ...


@web.command(name="serve")
@click.option("-w", "--workers", type=click.IntRange(min=1), default=1)
@click.option("--reload", is_flag=True, default=False, help="restart the server when source files change")
@di.inject
def serve(
    workers: int,
    reload: bool,
    boot_cf: BootConfiguration = di.Provide["_boot_config"],
    logging_cf: LoggingSettings = di.Provide["config.logging", di.as_(LoggingSettings)],  # noqa: B008
    web_cf: WebSettings = di.Provide["config.web", di.as_(WebSettings)],  # noqa: B008
):
    """Start the evaluation API backend."""
    # the factory runs in uvicorn's process and boots its own container from this
    os.environ[BootVariable] = boot_cf.model_dump_json()
    uvicorn.run(
        "assessor.web.main:create_app",
        factory=True,
        reload=reload,
        workers=workers,
        log_config=logging_cf.as_dict_config(),
        host=str(web_cf.backend.host),
        port=web_cf.backend.port,
    )
