from __future__ import annotations

import logging
import traceback
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from laundrybill.errors import ServiceError
from laundrybill.logging import configure_logging
from laundrybill.settings import settings
from web.auth import router as auth_router
from web.cors import CORS_HEADERS, CORSMiddleware
from web.routes.bills import router as bills_router
from web.routes.customers import router as customers_router

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info("Application started (store=%s, table=%s)", settings.store_backend, settings.table_name)
    yield


app = FastAPI(title="Laundry Billing API", docs_url=None, redoc_url=None, lifespan=lifespan)

app.add_middleware(CORSMiddleware)

app.include_router(auth_router)
app.include_router(customers_router)
app.include_router(bills_router)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    return JSONResponse({"message": exc.message}, status_code=exc.status_code)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code in (404, 405):
        return JSONResponse(
            {"message": f"No route configured for {request.method} {request.url.path}"},
            status_code=404,
        )
    return JSONResponse({"message": str(exc.detail)}, status_code=exc.status_code)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(
        "Unhandled exception on %s %s:\n%s",
        request.method,
        request.url.path,
        traceback.format_exc(),
    )
    # Served outside the CORS middleware, so the headers are added here.
    return JSONResponse({"message": "Internal server error"}, status_code=500, headers=CORS_HEADERS)


@app.get("/health")
async def health():
    return {"status": "ok"}
