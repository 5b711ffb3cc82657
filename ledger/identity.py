import threading
from typing import Optional, Protocol
from uuid import uuid4

import httpx
from firebase_admin import auth as firebase_auth
from passlib.context import CryptContext

from .exceptions import DuplicateEmailError, InvalidCredentialsError
from .logging_config import get_logger

logger = get_logger(__name__)

FIREBASE_SIGN_IN_URL = "https://identitytoolkit.googleapis.com/v1/accounts:signInWithPassword"


class IdentityProvider(Protocol):
    def create_identity(self, email: str, password: str) -> str: ...

    def verify_password(self, email: str, password: str) -> str: ...


class InMemoryIdentityProvider:
    """Email/password identities kept in process, for local runs and tests."""

    def __init__(self):
        self.identities: dict[str, dict] = {}
        self._lock = threading.Lock()
        self._pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

    def create_identity(self, email: str, password: str) -> str:
        key = email.strip().lower()
        with self._lock:
            if key in self.identities:
                raise DuplicateEmailError(f"Email {email} is already registered")
            uid = uuid4().hex
            self.identities[key] = {
                "uid": uid,
                "password_hash": self._pwd_context.hash(password),
            }
        return uid

    def verify_password(self, email: str, password: str) -> str:
        identity = self.identities.get(email.strip().lower())
        if not identity or not self._pwd_context.verify(password, identity["password_hash"]):
            raise InvalidCredentialsError("Invalid credentials")
        return identity["uid"]


class FirebaseIdentityProvider:
    """Firebase Authentication.

    Accounts are created through the Admin SDK. Passwords are checked against
    the Identity Toolkit REST endpoint, which the Admin SDK does not expose.
    """

    def __init__(self, api_key: Optional[str], timeout: float = 15.0,
                 http_client: Optional[httpx.Client] = None):
        self.api_key = api_key
        self.http_client = http_client or httpx.Client(timeout=timeout)

    def create_identity(self, email: str, password: str) -> str:
        try:
            user_record = firebase_auth.create_user(email=email, password=password)
        except firebase_auth.EmailAlreadyExistsError as e:
            raise DuplicateEmailError(f"Email {email} is already registered") from e
        return user_record.uid

    def verify_password(self, email: str, password: str) -> str:
        if not self.api_key:
            raise InvalidCredentialsError("Password sign-in is not configured")
        try:
            response = self.http_client.post(
                FIREBASE_SIGN_IN_URL,
                params={"key": self.api_key},
                json={"email": email, "password": password, "returnSecureToken": True},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning("login_failed", email=email, detail=e.response.text)
            raise InvalidCredentialsError("Invalid credentials") from e
        except httpx.HTTPError as e:
            logger.warning("login_failed", email=email, error=str(e))
            raise InvalidCredentialsError("Invalid credentials") from e
        user_id = response.json().get("localId")
        if not user_id:
            logger.warning("login_failed", email=email, detail="response without localId")
            raise InvalidCredentialsError("Invalid credentials")
        return user_id
