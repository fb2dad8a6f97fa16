from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt


class InvalidToken(ValueError):
    """Raised when a bearer token cannot be verified."""


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))


def create_access_token(
    user_id: int,
    secret: str,
    algorithm: str = "HS256",
    expires_in: timedelta = timedelta(days=1),
) -> str:
    claims = {
        "id": user_id,
        "exp": datetime.now(timezone.utc) + expires_in,
    }
    return jwt.encode(claims, secret, algorithm=algorithm)


def decode_access_token(token: str, secret: str, algorithm: str = "HS256") -> int:
    """Verify signature and expiry, return the user id the token was issued for."""
    try:
        claims = jwt.decode(token, secret, algorithms=[algorithm])
    except JWTError as exc:
        raise InvalidToken(str(exc)) from exc
    try:
        return int(claims["id"])
    except (KeyError, TypeError, ValueError) as exc:
        raise InvalidToken("Token subject missing.") from exc
