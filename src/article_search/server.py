"""FastAPI surface exposing the display state and the user actions."""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .config import get_settings
from .connectivity import ConnectivityMonitor
from .controller import SyncController, ViewState, build_controller
from .logging_config import configure_logging, get_logger

logger = get_logger("article_search.server")


class CachePreference(BaseModel):
    enabled: bool


def state_payload(state: ViewState) -> Dict[str, Any]:
    return {
        "status": state.status.value,
        "refreshing": state.refreshing,
        "connected": state.connected,
        "offline": state.offline,
        "notice": state.notice,
        "cache_enabled": state.cache_enabled,
        "articles": [article.model_dump() for article in state.articles],
    }


def create_app(
    controller: Optional[SyncController] = None,
    monitor: Optional[ConnectivityMonitor] = None,
) -> FastAPI:
    """
    Build the app around a controller.

    With no controller given, one is wired from settings at startup, its actor
    thread is started, and a connectivity monitor drives automatic refreshes.
    A controller passed in is used as-is; the caller drains its queue.
    """
    owns_controller = controller is None

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        ctrl = app.state.controller
        mon = app.state.monitor
        if owns_controller:
            configure_logging()
            settings = get_settings()
            ctrl = build_controller(settings)
            mon = mon or ConnectivityMonitor.from_settings(settings, ctrl.on_connectivity_change)
            app.state.controller = ctrl
            app.state.monitor = mon
            ctrl.start()
        if mon:
            mon.start()
        try:
            yield
        finally:
            if mon:
                mon.stop()
            if owns_controller:
                ctrl.stop()

    app = FastAPI(title="Article Search", lifespan=lifespan)
    app.state.controller = controller
    app.state.monitor = monitor

    def _controller() -> SyncController:
        ctrl = app.state.controller
        if ctrl is None:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Controller not started.",
            )
        return ctrl

    @app.get("/health")
    def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/articles")
    def articles() -> Dict[str, Any]:
        return state_payload(_controller().state)

    @app.post("/refresh", status_code=status.HTTP_202_ACCEPTED)
    def refresh() -> JSONResponse:
        ctrl = _controller()
        if not ctrl.state.connected:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={"status": "offline", "notice": ctrl.state.notice},
            )
        ctrl.request_refresh()
        return JSONResponse(
            status_code=status.HTTP_202_ACCEPTED, content={"status": "refresh requested"}
        )

    @app.post("/cache/clear", status_code=status.HTTP_202_ACCEPTED)
    def clear_cache() -> JSONResponse:
        _controller().clear_cache()
        return JSONResponse(
            status_code=status.HTTP_202_ACCEPTED, content={"status": "clear requested"}
        )

    @app.get("/preferences/cache")
    def get_cache_preference() -> Dict[str, bool]:
        return {"enabled": _controller().state.cache_enabled}

    @app.put("/preferences/cache")
    def put_cache_preference(preference: CachePreference) -> Dict[str, bool]:
        _controller().set_cache_enabled(preference.enabled)
        return {"enabled": preference.enabled}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "article_search.server:app",
        host=os.getenv("ARTICLE_SEARCH_HOST", "127.0.0.1"),
        port=int(os.getenv("ARTICLE_SEARCH_PORT", "8000")),
    )
