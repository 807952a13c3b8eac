import logging
import time
from typing import Optional
from urllib.parse import unquote

import ulid
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from clipbridge import __version__
from clipbridge.config import Settings
from clipbridge.errors import ClientError
from clipbridge.models.clipboard import PUSH_KINDS
from clipbridge.models.schema import ErrorBody
from clipbridge.services.sync_service import ANONYMOUS_CLIENT, SyncHandler

logger = logging.getLogger(__name__)

CLIENT_NAME_HEADER = "X-Client-Name"
API_VERSION_HEADER = "X-API-Version"
CONTENT_TYPE_HEADER = "X-Content-Type"
REQUEST_ID_HEADER = "X-Request-ID"

VERSION_MISMATCH = "接口版本不匹配，请升级您的捷径"
INVALID_BODY = "请求内容格式错误"


def decode_client_name(raw: Optional[str]) -> str:
    if not raw:
        return ANONYMOUS_CLIENT
    try:
        name = unquote(raw, errors="strict")
    except UnicodeDecodeError:
        return ANONYMOUS_CLIENT
    return name or ANONYMOUS_CLIENT


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorBody(error=message).model_dump())


def create_app(handler: SyncHandler, settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()
    app = FastAPI(title="clipbridge", version=__version__,
                  docs_url=None, redoc_url=None, openapi_url=None)
    app.state.handler = handler
    app.state.settings = settings

    @app.middleware("http")
    async def api_version_checker(request: Request, call_next):
        if request.headers.get(API_VERSION_HEADER) != settings.api_version:
            return _error(400, VERSION_MISMATCH)
        return await call_next(request)

    # registered last so it wraps the version check
    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request.state.client_name = decode_client_name(
            request.headers.get(CLIENT_NAME_HEADER))
        request.state.request_id = str(ulid.new())

        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        response.headers[REQUEST_ID_HEADER] = request.state.request_id
        client_ip = request.client.host if request.client else "-"
        message = (
            f"[{request.state.request_id}] {request.method} {request.url.path} "
            f"{response.status_code} {duration_ms:.1f}ms "
            f"client={request.state.client_name} ip={client_ip}"
        )
        if response.status_code >= 500:
            logger.error(message)
        elif response.status_code >= 400:
            logger.warning(message)
        else:
            logger.info(message)
        return response

    @app.exception_handler(ClientError)
    async def client_error_handler(request: Request, exc: ClientError):
        return _error(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        # a known path with an unsupported method is not found either
        if exc.status_code in (404, 405):
            logger.info(f"404 not found: {request.method} {request.url.path}")
            return Response(status_code=404)
        return _error(exc.status_code, str(exc.detail))

    @app.get("/")
    async def pull(request: Request):
        def read_clipboard():
            snapshot = handler.pull(request.state.client_name, request.state.request_id)
            return snapshot.to_payload()

        payload = await run_in_threadpool(read_clipboard)
        return JSONResponse(status_code=200, content=payload)

    @app.post("/")
    async def push(request: Request):
        kind = request.headers.get(CONTENT_TYPE_HEADER)
        if kind not in PUSH_KINDS:
            raise ClientError(f"不支持的内容类型: {kind}")

        try:
            body = await request.json()
        except ValueError as e:
            logger.warning(f"[{request.state.request_id}] failed to bind body: {e}")
            raise ClientError(INVALID_BODY) from e

        await run_in_threadpool(
            handler.push, kind, body, request.state.client_name, request.state.request_id)
        return Response(status_code=200)

    return app
