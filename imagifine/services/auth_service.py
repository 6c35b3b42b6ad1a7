# FILE: imagifine/services/auth_service.py
import bcrypt
import jwt
from datetime import datetime, timezone, timedelta

from imagifine.core.config import JWT_SECRET, JWT_ALGORITHM, JWT_EXPIRATION_HOURS
from imagifine.core.errors import AuthError


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))


def create_token(user_id: str, email: str) -> str:
    payload = {
        "user_id": user_id,
        "email": email,
        "sub": user_id,
        "exp": datetime.now(timezone.utc) + timedelta(hours=JWT_EXPIRATION_HOURS),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_token(token: str) -> str:
    """Return the account id asserted by a session token, or raise AuthError."""
    try:
        payload = jwt.decode(token.strip(), JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthError("Token expired")
    except jwt.InvalidTokenError:
        raise AuthError("Invalid token")

    user_id = payload.get("user_id") or payload.get("sub")
    if not user_id or not isinstance(user_id, str):
        raise AuthError("Invalid token payload")
    return user_id
