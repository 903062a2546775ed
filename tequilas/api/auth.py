"""
Authentication endpoints.
"""

from fastapi import APIRouter, Depends

from tequilas.api.deps import get_identity_service
from tequilas.schemas import (
    ErrorResponse,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
)
from tequilas.services import IdentityService

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Register a customer account",
)
async def register(
    request: RegisterRequest,
    service: IdentityService = Depends(get_identity_service),
) -> RegisterResponse:
    return await service.register(request)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Exchange credentials for a bearer token",
)
async def login(
    request: LoginRequest,
    service: IdentityService = Depends(get_identity_service),
) -> LoginResponse:
    """
    Returns a signed token, its expiry and the account's roles.
    Send it back as `Authorization: Bearer <token>`.
    """
    return await service.login(request.email, request.password)
