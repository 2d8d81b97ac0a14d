"""Sign-in models for the cart backend"""

from pydantic import BaseModel, Field


class TokenRequest(BaseModel):
    """Mock sign-in request"""
    subject: str = Field(min_length=1, max_length=255)


class TokenResponse(BaseModel):
    """Issued access token"""
    access_token: str
    token_type: str = "bearer"
    subject: str
