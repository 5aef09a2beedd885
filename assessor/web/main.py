"""Main entry point for the assessor web application."""

import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from assessor.core import AssessorContainer, BootConfiguration, di
from assessor.core.config.web import WebSettings
from assessor.lib.json import FastAPIJSONResponse

from .route import router

BootVariable = "__Assessor_BOOT"


@di.inject
def _create_app(config: WebSettings = di.Provide["config.web", di.as_(WebSettings)]) -> FastAPI:
    app = FastAPI(
        title="Assessor",
        description="Evaluation and integrity orchestration for assessment attempts",
        version="0.1.0",
        default_response_class=FastAPIJSONResponse,
    )

    if config.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(router)
    return app


def create_app() -> FastAPI:
    """Factory function for uvicorn."""
    boot_vars = os.getenv(BootVariable)
    if boot_vars:
        boot_cf = BootConfiguration.model_validate_json(boot_vars)
        ct = AssessorContainer()
        AssessorContainer.boot(ct, **dict(boot_cf))
        ct.wire(packages=["assessor.web"])
        return _create_app(config=WebSettings(**ct.config.web()))
    return _create_app()
