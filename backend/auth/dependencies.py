import hmac

import jwt
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from backend.auth import jwt_handler
from backend.core.config import Settings
from backend.scheduling.resolver import SchedulingService

security = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_scheduling_service(request: Request) -> SchedulingService:
    return request.app.state.scheduling_service


def is_token_accepted(token: str, settings: Settings) -> bool:
    if settings.jwt_secret_key:
        try:
            jwt_handler.decode_access_token(settings, token)
            return True
        except jwt.PyJWTError:
            pass

    return any(hmac.compare_digest(token.encode(), static_token.encode()) for static_token in settings.static_tokens)


def require_api_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    settings: Settings = Depends(get_settings),
) -> str:
    if credentials is None:
        raise HTTPException(status_code=401, detail="missing authorization")
    if credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=401, detail="invalid authorization format")

    token = credentials.credentials
    if not is_token_accepted(token, settings):
        raise HTTPException(status_code=401, detail="invalid token")
    return token
