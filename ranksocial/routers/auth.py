"""Session API routes backed by the auth service of the backend."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from ..schemas import SessionResponse, SignInRequest, SignUpRequest
from ..services import SessionContext, SessionError, get_session_context, require_session

router = APIRouter(prefix="/auth", tags=["auth"])


def _to_session_response(context: SessionContext) -> SessionResponse:
    return SessionResponse(
        access_token=context.access_token,
        user_id=context.user.id if context.user else None,
        email=context.user.email if context.user else None,
        profile=context.profile,
    )


@router.post("/sign-up", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def sign_up_endpoint(
    payload: SignUpRequest,
    context: SessionContext = Depends(get_session_context),
) -> SessionResponse:
    try:
        await context.sign_up(
            payload.email,
            payload.password,
            payload.username,
            payload.display_name,
            confirm_password=payload.confirm_password,
        )
    except SessionError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message) from exc
    return _to_session_response(context)


@router.post("/sign-in", response_model=SessionResponse)
async def sign_in_endpoint(
    payload: SignInRequest,
    context: SessionContext = Depends(get_session_context),
) -> SessionResponse:
    try:
        await context.sign_in(payload.email, payload.password)
    except SessionError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message) from exc
    return _to_session_response(context)


@router.post("/sign-out", status_code=status.HTTP_204_NO_CONTENT)
async def sign_out_endpoint(context: SessionContext = Depends(require_session)) -> None:
    await context.sign_out()


@router.get("/me", response_model=SessionResponse)
async def me_endpoint(context: SessionContext = Depends(require_session)) -> SessionResponse:
    return _to_session_response(context)
