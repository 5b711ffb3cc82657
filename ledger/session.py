from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from .exceptions import InvalidCredentialsError


class SessionIssuer:
    """Signs bearer tokens carrying ``userId`` and ``email``."""

    def __init__(self, secret_key: str, algorithm: str = "HS256", ttl_minutes: int = 60):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.ttl = timedelta(minutes=ttl_minutes)

    def issue(self, user_id: str, email: str) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "userId": user_id,
            "email": email,
            "iat": now,
            "exp": now + self.ttl,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def decode(self, token: str) -> dict:
        try:
            return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            raise InvalidCredentialsError("Invalid or expired token") from e
