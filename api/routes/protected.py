"""
api/routes/protected.py -- Sample endpoint behind the bearer gate.

Routes:
  GET /protected  -- echoes the authenticated user id from the token claims
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from api.models import ProtectedResponse
from auth.dependencies import get_current_claims, require_bearer
from auth.models import Claims

router = APIRouter(dependencies=[Depends(require_bearer)])


@router.get("/protected", response_model=ProtectedResponse)
async def protected(claims: Claims = Depends(get_current_claims)) -> ProtectedResponse:
    return ProtectedResponse(message="This is a protected endpoint", user_id=claims.subject)
