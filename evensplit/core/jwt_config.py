import secrets
import jwt
from jwt import InvalidTokenError, ExpiredSignatureError
from datetime import datetime, timedelta, timezone
from evensplit.core.config import settings
from fastapi import HTTPException, Request

def create_access_token(data: dict, expires_min: int | None = None):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_min or settings.ACCESS_TOKEN_MINUTES)
    to_encode.update({"exp": expire, "type": "access"})

    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm = settings.JWT_ALGO)

def create_refresh_token(data: dict, expires_days: int | None = None):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(days=expires_days or settings.REFRESH_TOKEN_DAYS)
    # jti keeps two refresh tokens minted in the same second distinct
    to_encode.update({"exp" : expire, "type": "refresh", "jti": secrets.token_hex(8)})

    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm = settings.JWT_ALGO)

def decode_token(token : str, expected_type: str = "access"):
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms = [settings.JWT_ALGO]
        )
    except ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token has expired")
    except InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid Token")

    if payload.get("type") != expected_type:
        raise HTTPException(status_code=401, detail="Invalid Token")

    return payload

def get_token_from_cookie(request : Request) -> str:
    token = request.cookies.get("access_token")
    if not token:
        auth_header = request.headers.get("Authorization")
        if auth_header and auth_header.startswith("Bearer "):
            token = auth_header.split(" ", 1)[1]

    if not token:
        raise HTTPException(401, "Unauthorized access")

    return token.strip()
