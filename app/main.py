# app/main.py
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from app.core.config import get_settings
from app.core.logging_config import setup_logging
from app.core.services import Services, build_services
from app.routers import files, webhook


def create_app(services: Optional[Services] = None) -> FastAPI:
    if services is None:
        settings = get_settings()
        setup_logging(settings.log_level)
        services = build_services(settings)

    app = FastAPI(title="LINE training coach relay")
    app.state.services = services

    # Include routers
    app.include_router(webhook.router, prefix="/webhook", tags=["Webhook"])
    app.include_router(files.router, prefix="/files", tags=["Files"])

    @app.get("/", response_class=PlainTextResponse)
    def health():
        return "OK"

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=get_settings().port)
