from __future__ import annotations

import os
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .config import CORS_ORIGINS, STATIC_DIR
from .logging_config import get_logger
from .routers import websockets as ws_router
from .state import rooms
from .sync import SyncProtocol

logger = get_logger(__name__)


# Custom StaticFiles variant that disables caching for the client assets.
class NoCacheStaticFiles(StaticFiles):
    async def get_response(self, path: str, scope):  # type: ignore[override]
        response = await super().get_response(path, scope)
        response.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
        response.headers["Pragma"] = "no-cache"
        response.headers["Expires"] = "0"
        return response


def create_app(protocol: Optional[SyncProtocol] = None, static_dir: Optional[str] = STATIC_DIR) -> FastAPI:
    """Build the application. Tests pass their own *protocol* to get a fresh registry."""
    app = FastAPI(title="Tactile Grid")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    protocol = protocol if protocol is not None else SyncProtocol(rooms)
    app.state.manager = ws_router.ConnectionManager(protocol)

    app.include_router(ws_router.router)

    @app.get("/health")
    async def health():
        return {"status": "ok", "rooms": len(protocol.registry)}

    # Mount the client last so it does not shadow the routes above.
    if static_dir:
        if os.path.isdir(static_dir):
            app.mount("/", NoCacheStaticFiles(directory=static_dir, html=True), name="frontend")
        else:
            logger.warning(f"STATIC_DIR {static_dir!r} does not exist; not serving a client")

    logger.info("FastAPI application initialized")
    return app


app = create_app()

__all__ = ["app", "create_app", "NoCacheStaticFiles"]
