from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError

from shared.core.config import settings
from shared.core.schemas import UserToken
from shared.helpers.json_response_helper import error_payload
from shared.utils.app_status_code import AppStatusCode

security = HTTPBearer()


def get_bearer_token(credentials: HTTPAuthorizationCredentials = Depends(security)) -> str:
    """Raw token, forwarded as-is to the directory services."""
    return credentials.credentials


def verify_token(token: str) -> UserToken:
    """Verify and decode a JWT token."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET,
                             algorithms=[settings.JWT_ALGORITHM])
        return UserToken(**payload)
    except (JWTError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error_payload(
                "Invalid or expired token", AppStatusCode.AUTHENTICATION_TOKEN_INVALID),
            headers={"WWW-Authenticate": "Bearer"},
        )


def validate_current_token(token: str = Depends(get_bearer_token)) -> UserToken:
    return verify_token(token)
