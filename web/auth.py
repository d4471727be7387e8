from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from laundrybill.errors import UnauthorizedError
from laundrybill.services.session_service import bearer_token
from web.deps import get_session_service, read_json
from web.schemas import LoginOut, MessageOut, VerifyOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth")


@router.post("/login", response_model=LoginOut)
async def login(request: Request):
    body = await read_json(request)
    token, session = get_session_service(request).login(body.get("passcode"))
    logger.info("POST /auth/login — session issued for %s", session.username)
    return LoginOut(token=token, expires_at=session.expires_at, username=session.username)


@router.post("/logout", response_model=MessageOut)
async def logout(request: Request):
    get_session_service(request).logout(bearer_token(request.headers.get("authorization")))
    logger.info("POST /auth/logout — session closed")
    return MessageOut(message="Logged out successfully")


@router.get("/verify", response_model=VerifyOut)
async def verify(request: Request):
    try:
        session = get_session_service(request).verify(bearer_token(request.headers.get("authorization")))
    except UnauthorizedError:
        return JSONResponse({"authenticated": False, "message": "Unauthorized"}, status_code=401)
    return VerifyOut(authenticated=True, username=session.username, expires_at=session.expires_at)
