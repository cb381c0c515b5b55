# utils/tokenJWT.py
from jose import jwt
from jose.exceptions import JOSEError
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from config import Settings, settings
from database import get_db
from models.users import User
from schemas.user import TokenData
from services import auth as auth_service
from utils.errors import InvalidToken, TokenExpired


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TokenIssuer:
    """
    Issues and verifies signed session tokens (HS256 JWT by default).

    Tokens carry ``sub`` (user id), ``role`` and an absolute ``exp``. Nothing is
    stored server side; a token is valid until ``exp`` no matter what happens to
    the account afterwards.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        ttl: timedelta = timedelta(minutes=60),
        clock: Callable[[], datetime] = utc_now,
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.ttl = ttl
        self.clock = clock

    @classmethod
    def from_settings(cls, config: Settings, clock: Callable[[], datetime] = utc_now) -> "TokenIssuer":
        return cls(
            secret_key=config.SECRET_KEY,
            algorithm=config.ALGORITHM,
            ttl=timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES),
            clock=clock,
        )

    def issue(self, subject_id, role: str, ttl: Optional[timedelta] = None) -> str:
        now = self.clock()
        expire = now + (ttl if ttl is not None else self.ttl)
        to_encode = {
            "sub": str(subject_id),
            "role": role,
            "iat": now.timestamp(),
            "exp": expire.timestamp(),
        }
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenData:
        if not isinstance(token, str) or not token:
            raise InvalidToken()
        try:
            # Expiry is checked below against our own clock
            payload = jwt.decode(
                token, self.secret_key, algorithms=[self.algorithm], options={"verify_exp": False}
            )
        except JOSEError:
            raise InvalidToken()

        subject_id = payload.get("sub")
        role = payload.get("role")
        expire = payload.get("exp")
        if not subject_id or not isinstance(role, str):
            raise InvalidToken()
        if isinstance(expire, bool) or not isinstance(expire, (int, float)):
            raise InvalidToken()

        if self.clock().timestamp() >= expire:
            raise TokenExpired()
        return TokenData(subject_id=subject_id, role=role)


token_issuer = TokenIssuer.from_settings(settings)

# auto_error is off so a missing header answers 401 like any other bad token
bearer_scheme = HTTPBearer(auto_error=False)


def get_token_issuer() -> TokenIssuer:
    return token_issuer


# Retrieve the currently authenticated user based on the bearer token
def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> User:
    if credentials is None:
        raise InvalidToken("Not authenticated")
    return auth_service.authenticate(db, issuer, credentials.credentials)
