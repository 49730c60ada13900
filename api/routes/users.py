"""
api/routes/users.py -- User management endpoints (all behind the bearer gate).

Routes:
  POST   /users             -- create a user (same rules as /auth/register)
  GET    /users             -- page through active users (?limit=10&offset=0)
  GET    /users/{user_id}   -- one user
  PUT    /users/{user_id}   -- change email and/or password (self or admin)
  DELETE /users/{user_id}   -- soft delete (self or admin)

Ownership is checked in AuthService, not here, so every caller of the service
gets the same rule. Responses never include the password hash.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response

from api.models import CredentialsRequest, UserResponse, UserUpdateRequest
from auth.dependencies import get_auth_service, get_current_claims, require_bearer
from auth.models import Claims
from auth.service import AuthService

router = APIRouter(dependencies=[Depends(require_bearer)])


@router.post("/users", response_model=UserResponse, status_code=201)
def create_user(body: CredentialsRequest, service: AuthService = Depends(get_auth_service)) -> UserResponse:
    user = service.create_user(body.email, body.password)
    return UserResponse.from_user(user)


@router.get("/users", response_model=list[UserResponse])
def list_users(
    limit: int = Query(default=10, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    service: AuthService = Depends(get_auth_service),
) -> list[UserResponse]:
    """List active users ordered by id."""
    return [UserResponse.from_user(u) for u in service.list_users(limit=limit, offset=offset)]


@router.get("/users/{user_id}", response_model=UserResponse)
def get_user(user_id: int, service: AuthService = Depends(get_auth_service)) -> UserResponse:
    return UserResponse.from_user(service.get_user(user_id))


@router.put("/users/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    body: UserUpdateRequest,
    claims: Claims = Depends(get_current_claims),
    service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    """Update a user's email and/or password. A new password is policy-checked and rehashed."""
    user = service.update_user(claims, user_id, email=body.email, password=body.password)
    return UserResponse.from_user(user)


@router.delete("/users/{user_id}", status_code=204)
def delete_user(
    user_id: int,
    claims: Claims = Depends(get_current_claims),
    service: AuthService = Depends(get_auth_service),
) -> Response:
    service.delete_user(claims, user_id)
    return Response(status_code=204)
