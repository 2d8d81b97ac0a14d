"""Mock sign-in routes for the cart backend"""

from fastapi import APIRouter, HTTPException

from ..config import settings
from ..models.auth import TokenRequest, TokenResponse
from ..security.identity import issue_token

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/token", response_model=TokenResponse)
async def create_token(request: TokenRequest):
    """
    Issue an access token for a subject without credentials.

    Only available while mock login is enabled; a real deployment gets
    its tokens from the hosted auth provider.
    """
    if not settings.allow_mock_login:
        raise HTTPException(status_code=404, detail="Not found")

    return TokenResponse(access_token=issue_token(request.subject), subject=request.subject)
