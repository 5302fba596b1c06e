import jwt

from backend.core.config import Settings


def decode_access_token(settings: Settings, token: str) -> dict:
    return jwt.decode(
        token,
        settings.jwt_secret_key,
        algorithms=[settings.jwt_algorithm],
        leeway=settings.jwt_leeway_seconds,
    )
