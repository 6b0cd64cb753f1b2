from __future__ import annotations

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from image_bridge.config import Settings, get_settings
from image_bridge.handlers import assets_handler


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="Image Bridge asset server")
    app.state.static_root = settings.static_root

    @app.get("/healthz")
    async def healthz():
        return {"status": "ok"}

    app.include_router(assets_handler.router)
    # index.html, loader script and template data
    app.mount("/", StaticFiles(directory=settings.static_root, html=True, check_dir=False), name="static")
    return app


app = create_app()
