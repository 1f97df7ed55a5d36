"""
Main API module for linkgate.

Responsibilities:
    - GET  /{token}  resolve a token and redirect (302), or serve the 404 page
    - POST /         create a link from form fields key, link, validity
    - PATCH /        reload config from disk without restarting
    - GET  /         redirect to the configured home page

Architecture:
    - App Factory pattern (create_app) for test isolation and DI.
    - A LinkService owns config, storage, creator and resolver and swaps them
      atomically on reload; each request reads one consistent snapshot.
    - Errors from the manager layer are LinkgateError subclasses and are
      rendered into the {ok, message, content} envelope by one handler.

Running:
    python main.py                          # reads LINKGATE_CONFIG (config.json), in-memory if absent
    uvicorn --factory main:create_app       # same, under an external uvicorn
"""

import logging
import os
from typing import Optional

import uvicorn
from fastapi import BackgroundTasks, FastAPI, Form, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response

from linkgate.config import AppConfig, load_config, settings
from linkgate.errors import LinkgateError, LinkNotFound, StoreError
from linkgate.schemas import Envelope, StatusResponse
from linkgate.service import LinkService
from linkgate.storage.base import BaseStorage

log = logging.getLogger("linkgate")

DEFAULT_NOT_FOUND_HTML = (
    "<!DOCTYPE html><html><head><title>404 Not Found</title></head>"
    "<body><h1>404 Not Found</h1><p>This link does not exist or has expired.</p></body></html>"
)


def read_not_found_page(path: str) -> str:
    """Return the 404 document at `path`, or a built-in page if it can't be read."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except OSError as exc:
        log.debug("Not-found page %s unavailable (%s); using built-in page", path, exc)
        return DEFAULT_NOT_FOUND_HTML


def _initial_config(config_path: Optional[str]) -> AppConfig:
    path = config_path or settings.CONFIG_PATH
    if not os.path.exists(path):
        log.warning("Config file %s not found; starting with in-memory storage and no keys", path)
        return AppConfig(STORAGE="memory")
    return load_config(path)


def create_app(
    config: Optional[AppConfig] = None,
    storage: Optional[BaseStorage] = None,
    config_path: Optional[str] = None,
    not_found_page: Optional[str] = None,
) -> FastAPI:
    """
    Factory function to build and configure a new FastAPI app instance.

    Args:
        config (Optional[AppConfig]): Service config; loaded from `config_path`
            (or LINKGATE_CONFIG) when omitted.
        storage (Optional[BaseStorage]): Pre-built link store; built from config
            when omitted.
        config_path (Optional[str]): File re-read by PATCH /.
        not_found_page (Optional[str]): HTML file served with 404s.

    Returns:
        FastAPI: An application with its own LinkService.

    Raises:
        ConfigError: If an existing config file is invalid.
    """
    if config is None:
        config = _initial_config(config_path)

    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=logging.DEBUG if config.DEBUG else logging.INFO,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

    service = LinkService(config, storage=storage, loader=lambda: load_config(config_path))
    page_path = not_found_page or settings.NOT_FOUND_PAGE

    app = FastAPI(
        title="linkgate",
        description="Short link service with expiring links",
        debug=config.DEBUG,
        docs_url="/_docs",
        openapi_url="/_openapi.json",
        redoc_url=None,
    )
    app.state.service = service
    log.info("linkgate storage backend: %s", config.storage_backend)

    # ----------------------------------------------------------------
    # Error handlers
    # ----------------------------------------------------------------
    @app.exception_handler(LinkgateError)
    def linkgate_error_handler(request: Request, exc: LinkgateError) -> JSONResponse:
        if exc.status_code >= 500:
            log.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
        else:
            log.info("%s %s rejected: %s", request.method, request.url.path, exc.detail)
        body = Envelope(ok=False, message=exc.message)
        return JSONResponse(status_code=exc.status_code, content=body.model_dump())

    @app.exception_handler(Exception)
    def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        log.exception("Unhandled error on %s %s", request.method, request.url.path)
        body = Envelope(ok=False, message="error")
        return JSONResponse(status_code=500, content=body.model_dump())

    # ----------------------------------------------------------------
    # Routes
    # ----------------------------------------------------------------
    @app.get("/_health")
    def health():
        return {"status": "ok"}

    @app.get("/")
    def home() -> RedirectResponse:
        return RedirectResponse(url=service.state.config.HOME, status_code=302)

    @app.post("/", response_model=Envelope)
    def create_link(
        key: str = Form(""),
        link: str = Form(""),
        validity: Optional[str] = Form(None),
    ) -> Envelope:
        """
        Create a short link.

        Returns:
            Envelope: ok=True and the token in `content`.

        Errors (rendered by linkgate_error_handler):
            400 bad field(s), 403 forbidden, 500 error.
        """
        token = service.state.creator.create_link(key, link, validity)
        return Envelope(ok=True, message="successful", content=token)

    @app.patch("/", response_model=StatusResponse)
    def reload_config() -> Response:
        """Re-read config and swap in new storage/keys; the old state survives a failure."""
        try:
            service.reload()
        except (LinkgateError, ValueError) as exc:
            log.error("Config reload failed: %s", exc)
            return JSONResponse(
                status_code=500,
                content=StatusResponse(ok=False, message="error").model_dump(),
            )
        return JSONResponse(content=StatusResponse(ok=True, message="successful").model_dump())

    @app.get("/{token}")
    def redirect_link(token: str, background_tasks: BackgroundTasks) -> Response:
        """
        Redirect to the link's target, or serve the 404 page.

        Expired links are swept in a background task that runs after the
        404 response is sent. A store failure during lookup also serves the
        404 page; the cause is only logged.
        """
        resolver = service.state.resolver
        try:
            target = resolver.resolve(token, defer=background_tasks.add_task)
        except LinkNotFound as exc:
            log.debug("Not found: %s", exc.detail)
            return HTMLResponse(read_not_found_page(page_path), status_code=404)
        except StoreError as exc:
            log.error("Lookup of %s failed: %s", token, exc.detail)
            return HTMLResponse(read_not_found_page(page_path), status_code=404)
        return RedirectResponse(url=target, status_code=302)

    return app


if __name__ == "__main__":
    cfg = _initial_config(None)
    host, port = cfg.LISTEN
    uvicorn.run(
        create_app(cfg),
        host=host,
        port=port,
        log_level="debug" if cfg.DEBUG else "info",
    )
