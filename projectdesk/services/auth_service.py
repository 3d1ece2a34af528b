"""AuthService: WeChat code login with find-or-create user and token issuing."""

from datetime import UTC, datetime

import structlog
from sqlalchemy.exc import SQLAlchemyError

from projectdesk.core.exceptions import ExchangeError, StoreUnavailableError
from projectdesk.core.tokens import TokenIssuer
from projectdesk.db.base import Database
from projectdesk.db.models.user import User
from projectdesk.domain.identifiers import fallback_user_uuid
from projectdesk.domain.profile import ProfileSyncPolicy
from projectdesk.domain.results import FailureReason, ServiceResult
from projectdesk.domain.validation import clean_text
from projectdesk.integrations.wechat import WeChatClient
from projectdesk.schemas.auth import LoginPayload, LoginProfile, UserRecord
from projectdesk.services.user_directory import UserDirectory, UserUuidConflictError, build_user

logger = structlog.get_logger(__name__)


class AuthService:
    """Login flow.

    Steps: connect the store (never fatal), exchange the code for an openid,
    find or create the user, issue a token. When the store is unavailable
    the user is synthesized in memory and the payload is marked ``degraded``.
    """

    def __init__(
        self,
        database: Database,
        identity_client: WeChatClient,
        token_issuer: TokenIssuer,
        profile_policy: ProfileSyncPolicy = ProfileSyncPolicy.FREEZE,
        directory: UserDirectory | None = None,
    ):
        """Initialize with dependency injection.

        Args:
            database: Store handle, connected lazily on first login
            identity_client: Code exchange client (WeChat)
            token_issuer: Signs the session token
            profile_policy: What a returning user's login may change
            directory: Users collection access, built from ``database`` if omitted
        """
        self.database = database
        self.identity_client = identity_client
        self.token_issuer = token_issuer
        self.profile_policy = profile_policy
        self.directory = directory or UserDirectory(database)

    async def login(self, code: str | None, profile: LoginProfile | None = None) -> ServiceResult[LoginPayload]:
        if clean_text(code) is None:
            return ServiceResult.failure(FailureReason.MISSING_CODE, "code is required")
        profile = profile or LoginProfile()

        store_connected = await self.database.connect()
        if not store_connected:
            logger.warning("login_store_unavailable")

        try:
            code_session = await self.identity_client.exchange_code(code)
        except ExchangeError as exc:
            logger.warning("login_exchange_failed", error=exc.message, errcode=exc.code)
            return ServiceResult.failure(
                FailureReason.EXCHANGE_ERROR,
                exc.message,
                store_connected=store_connected,
            )

        user, is_new_user, degraded = await self._resolve_user(code_session.external_id, profile, store_connected)

        token = self.token_issuer.issue(user.uuid, user.external_id)
        payload = LoginPayload(
            token=token,
            user=UserRecord.from_model(user),
            is_new_user=is_new_user,
            login_time=datetime.now(UTC),
            degraded=degraded,
        )
        logger.info("login_succeeded", uuid=user.uuid, is_new_user=is_new_user, degraded=degraded)
        return ServiceResult.success(payload, store_connected=not degraded)

    async def _resolve_user(
        self,
        external_id: str,
        profile: LoginProfile,
        store_connected: bool,
    ) -> tuple[User, bool, bool]:
        """Return ``(user, is_new_user, degraded)``."""
        if not store_connected:
            return self._synthesize_user(external_id, profile), True, True

        try:
            user = await self.directory.find_by_external_id(external_id)
            if user is None:
                user, created = await self.directory.create(external_id, profile)
                return user, created, False

            logger.info("login_existing_user", uuid=user.uuid)
            user = await self.directory.sync_profile(user, profile, self.profile_policy)
            return user, False, False
        except (SQLAlchemyError, StoreUnavailableError, UserUuidConflictError) as exc:
            logger.error(
                "login_directory_degraded",
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return self._synthesize_user(external_id, profile), True, True

    @staticmethod
    def _synthesize_user(external_id: str, profile: LoginProfile) -> User:
        user = build_user(fallback_user_uuid(), external_id, profile)
        logger.warning("login_user_synthesized", uuid=user.uuid)
        return user
