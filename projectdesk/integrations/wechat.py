"""WeChat mini-program login: exchange a wx.login() code for an openid.

Wraps the ``sns/jscode2session`` endpoint. The session key is returned to
the caller but never logged.
"""

from dataclasses import dataclass, field

import httpx
import structlog

from projectdesk.core.config import Settings
from projectdesk.core.exceptions import ExchangeError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CodeSession:
    """Verified identity returned by the provider for one login code."""

    external_id: str
    session_key: str = field(repr=False)
    union_id: str | None = None


class WeChatClient:
    """Client for the WeChat code-exchange API."""

    BASE_URL = "https://api.weixin.qq.com"
    SESSION_PATH = "/sns/jscode2session"

    def __init__(
        self,
        app_id: str,
        app_secret: str,
        base_url: str = BASE_URL,
        timeout_seconds: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize WeChat client.

        Args:
            app_id: Mini-program AppID
            app_secret: Mini-program AppSecret
            base_url: API host, overridable for tests and proxies
            timeout_seconds: Per-call timeout for the exchange request
            transport: Optional httpx transport (tests pass httpx.MockTransport)
        """
        self.app_id = app_id
        self.app_secret = app_secret
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "WeChatClient":
        return cls(
            app_id=settings.wechat_app_id,
            app_secret=settings.wechat_app_secret,
            base_url=settings.wechat_api_base,
            timeout_seconds=settings.identity_timeout_seconds,
        )

    async def exchange_code(self, code: str) -> CodeSession:
        """Exchange a one-time login code for the user's openid.

        Raises:
            ExchangeError: provider returned an errcode (errmsg passed through
                verbatim), the call failed or timed out, or the client is not
                configured.
        """
        if not self.app_id or not self.app_secret:
            raise ExchangeError("identity provider not configured")

        params = {
            "appid": self.app_id,
            "secret": self.app_secret,
            "js_code": code,
            "grant_type": "authorization_code",
        }

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout_seconds,
                transport=self.transport,
            ) as client:
                response = await client.get(self.SESSION_PATH, params=params)
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException as exc:
            logger.error("wechat_exchange_timeout", timeout_seconds=self.timeout_seconds)
            raise ExchangeError("identity provider timed out") from exc
        except httpx.HTTPError as exc:
            logger.error("wechat_exchange_http_error", error=str(exc), error_type=type(exc).__name__)
            raise ExchangeError("identity provider request failed") from exc
        except ValueError as exc:
            logger.error("wechat_exchange_bad_payload", error=str(exc))
            raise ExchangeError("identity provider returned an invalid response") from exc

        if not isinstance(data, dict):
            raise ExchangeError("identity provider returned an invalid response")

        errcode = data.get("errcode")
        if errcode:
            message = data.get("errmsg") or "identity provider rejected the code"
            logger.warning("wechat_exchange_rejected", errcode=errcode, errmsg=message)
            raise ExchangeError(message, code=errcode)

        openid = data.get("openid")
        if not openid:
            raise ExchangeError("identity provider returned no openid")

        logger.info(
            "wechat_exchange_succeeded",
            openid=openid,
            session_key_length=len(data.get("session_key") or ""),
        )
        return CodeSession(
            external_id=openid,
            session_key=data.get("session_key", ""),
            union_id=data.get("unionid"),
        )
