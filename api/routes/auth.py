"""
api/routes/auth.py -- Public authentication endpoints.

Routes:
  POST /auth/login     -- email/password login; returns a bearer token
  POST /auth/register  -- create an account; returns the new id, no token

Security:
  AuthService.login() equalizes timing and raises the same
      AuthenticationError for unknown email and wrong password. Do NOT inline
      store lookups + verify_password() here.
  Cache-Control: no-store on login responses so tokens are not cached by
      intermediaries.
  Both handlers are plain `def`: FastAPI runs them on its threadpool, keeping
      bcrypt off the event loop.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.models import CredentialsRequest, LoginResponse, RegisterResponse
from auth.dependencies import get_auth_service
from auth.service import AuthService

# Auth policy:
# - POST /auth/login:     public -- login endpoint must be unauthenticated
# - POST /auth/register:  public -- self-registration
router = APIRouter()


@router.post("/auth/login", response_model=LoginResponse)
def login(body: CredentialsRequest, service: AuthService = Depends(get_auth_service)) -> JSONResponse:
    """Authenticate with email and password; return a 24-hour bearer token."""
    result = service.login(body.email, body.password)
    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(token=result.token, user_id=result.user_id, email=result.email).model_dump(),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/auth/register", response_model=RegisterResponse, status_code=201)
def register(body: CredentialsRequest, service: AuthService = Depends(get_auth_service)) -> RegisterResponse:
    """Create a new account. The caller logs in separately to obtain a token."""
    user = service.register(body.email, body.password)
    return RegisterResponse(user_id=user.id, email=user.email)
