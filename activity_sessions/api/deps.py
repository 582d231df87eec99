# activity_sessions/api/deps.py
import secrets
from typing import Generator, Optional
from fastapi import Depends, HTTPException, status, Security
from fastapi.security import OAuth2PasswordBearer, APIKeyHeader
from jose import JWTError, jwt

from activity_sessions.core.config import settings
from activity_sessions.schemas.token import TokenPayload
from activity_sessions.db.session import SessionLocal


def get_db() -> Generator:
    """Request-scoped database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# Tokens come from the auth service; tokenUrl only feeds the OpenAPI docs.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token")
oauth2_scheme_optional = OAuth2PasswordBearer(tokenUrl="token", auto_error=False)


def _decode_token(token: str) -> TokenPayload:
    """Raises JWTError or ValueError when the token or its claims are bad."""
    payload = jwt.decode(token, settings.JWT_SECRET, algorithms=["HS256"])
    return TokenPayload(**payload)


def get_current_user(token: str = Depends(oauth2_scheme)) -> TokenPayload:
    try:
        return _decode_token(token)
    except (JWTError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_current_user_optional(
    token: Optional[str] = Depends(oauth2_scheme_optional),
) -> Optional[TokenPayload]:
    """Anonymous callers get None; an invalid token counts as anonymous."""
    if token is None:
        return None
    try:
        return _decode_token(token)
    except (JWTError, ValueError):
        return None


api_key_header = APIKeyHeader(name="X-Internal-Api-Key", auto_error=False)


def get_internal_api_key(api_key: Optional[str] = Security(api_key_header)) -> str:
    """Guards the sweep endpoints that the scheduler or ops tooling call."""
    if api_key and secrets.compare_digest(api_key, settings.INTERNAL_API_KEY):
        return api_key
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or missing Internal API Key",
    )
