from __future__ import annotations

import logging
import uuid

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .errors import CodecError, UnknownTableError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(CodecError)
    async def codec_error_handler(request: Request, exc: CodecError) -> JSONResponse:
        logger.info("rejected %s: %s", request.url.path, exc)
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(UnknownTableError)
    async def unknown_table_handler(_: Request, exc: UnknownTableError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        error_id = str(uuid.uuid4())
        logger.exception("Unhandled error id=%s path=%s", error_id, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error. Reference this error_id with support.",
                "error_id": error_id,
            },
        )
