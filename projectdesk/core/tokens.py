"""Session token issuing for logged-in mini-program users."""

from datetime import UTC, datetime, timedelta

import jwt as pyjwt

from projectdesk.core.config import Settings
from projectdesk.core.exceptions import TokenError


class TokenIssuer:
    """Signs bearer tokens binding the internal uuid to the WeChat openid."""

    def __init__(self, secret: str, algorithm: str = "HS256", ttl: timedelta = timedelta(days=7)):
        self.secret = secret
        self.algorithm = algorithm
        self.ttl = ttl

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenIssuer":
        return cls(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            ttl=timedelta(days=settings.token_ttl_days),
        )

    def issue(self, uuid: str, external_id: str, now: datetime | None = None) -> str:
        issued_at = now or datetime.now(UTC)
        payload = {
            "uuid": uuid,
            "openid": external_id,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.ttl).timestamp()),
        }
        return pyjwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode(self, token: str) -> dict:
        """Verify a token and return its claims.

        Raises ``TokenError`` on expiry, bad signature or missing claims.
        """
        try:
            return pyjwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["uuid", "openid", "exp", "iat"]},
            )
        except pyjwt.ExpiredSignatureError as exc:
            raise TokenError("Token expired") from exc
        except pyjwt.InvalidTokenError as exc:
            raise TokenError(f"Invalid token: {exc}") from exc
