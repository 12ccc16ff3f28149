"""
Client serving.

In production the pre-built client bundle is served from `static_dir`, with
`index.html` as the fallback for any path the client router owns. In
development, page requests are relayed to the bundler's dev server so the
client is served live from source.
"""

import logging
from pathlib import Path
from typing import Optional

import requests
from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import FileResponse, HTMLResponse, JSONResponse, PlainTextResponse, Response

from textpost.config import Settings

logger = logging.getLogger(__name__)

DEV_PROXY_TIMEOUT_SEC = 10

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
# GET (and HEAD) pages are served by the static or dev router
NON_PAGE_METHODS = ["POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

OAUTH_CALLBACK_HTML = """<!doctype html>
<html>
  <head><title>Signing in...</title></head>
  <body>
    <p>Authentication successful. This window should close automatically.</p>
    <script>
      if (window.opener) {
        window.opener.postMessage({ type: 'OAUTH_AUTH_SUCCESS' }, window.location.origin);
        window.close();
      } else {
        window.location.href = '/';
      }
    </script>
  </body>
</html>
"""

router = APIRouter(tags=["web"])


@router.get("/auth/callback", response_class=HTMLResponse)
async def oauth_callback():
    """Landing page for the OAuth redirect; notifies the opener window when run as a popup"""
    return HTMLResponse(OAUTH_CALLBACK_HTML)


@router.api_route("/api/{path:path}", methods=ALL_METHODS, include_in_schema=False)
async def api_not_found(request: Request, path: str):
    return JSONResponse(
        status_code=404,
        content={"error": f"API route not found: {request.method} {request.url.path}"}
    )


def page_not_found() -> PlainTextResponse:
    return PlainTextResponse("Page not found", status_code=404)


fallback_router = APIRouter(include_in_schema=False)


@fallback_router.api_route("/{full_path:path}", methods=NON_PAGE_METHODS)
async def no_such_page(full_path: str):
    return page_not_found()


def resolve_static_file(static_dir: Path, path: str) -> Optional[Path]:
    """Map a request path to a file inside static_dir, refusing anything that escapes it"""
    root = static_dir.resolve()
    candidate = (root / path).resolve()
    if candidate != root and root not in candidate.parents:
        return None
    return candidate if candidate.is_file() else None


def static_router(settings: Settings) -> APIRouter:
    static_dir = Path(settings.static_dir)
    spa = APIRouter(include_in_schema=False)

    @spa.get("/{full_path:path}")
    async def serve_bundle(full_path: str):
        asset = resolve_static_file(static_dir, full_path)
        if asset is not None:
            return FileResponse(asset)
        index = static_dir / "index.html"
        if index.is_file():
            return FileResponse(index)
        logger.warning(f"No client bundle at {static_dir}")
        return page_not_found()

    return spa


def dev_proxy_router(settings: Settings) -> APIRouter:
    upstream = settings.dev_server_url.rstrip("/")
    proxy = APIRouter(include_in_schema=False)

    # sync def: runs in the threadpool while requests blocks
    @proxy.get("/{full_path:path}")
    def relay_to_dev_server(full_path: str, request: Request):
        url = f"{upstream}/{full_path}"
        try:
            upstream_response = requests.get(
                url,
                params=list(request.query_params.multi_items()),
                headers={"accept": request.headers.get("accept", "*/*")},
                timeout=DEV_PROXY_TIMEOUT_SEC,
            )
        except requests.RequestException as e:
            logger.error(f"Dev server unreachable at {upstream}: {e}")
            return PlainTextResponse("Dev server unavailable", status_code=502)
        if upstream_response.status_code == 404:
            return page_not_found()
        return Response(
            content=upstream_response.content,
            status_code=upstream_response.status_code,
            media_type=upstream_response.headers.get("content-type"),
        )

    return proxy


def mount_client(app: FastAPI, settings: Settings) -> None:
    """Register the client-serving catch-all. Must run after every API router is included."""
    app.include_router(router)
    if settings.is_production:
        logger.info(f"Serving client bundle from {settings.static_dir}")
        app.include_router(static_router(settings))
    else:
        logger.info(f"Relaying client requests to dev server at {settings.dev_server_url}")
        app.include_router(dev_proxy_router(settings))
    app.include_router(fallback_router)
