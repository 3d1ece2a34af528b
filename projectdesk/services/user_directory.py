"""UserDirectory: lookup and creation of users keyed by WeChat openid."""

from datetime import UTC, datetime

import structlog
from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from tenacity import retry, retry_if_exception_type, stop_after_attempt

from projectdesk.core.exceptions import ProjectDeskError, StoreUnavailableError
from projectdesk.db.base import Database
from projectdesk.db.models.user import User
from projectdesk.domain.identifiers import USER_UUID_PATTERN, fallback_user_uuid, next_user_uuid
from projectdesk.domain.profile import DEFAULT_USERNAME, ProfileSyncPolicy, parse_gender, profile_changes
from projectdesk.domain.validation import MAX_TEXT_LENGTH, clean_text
from projectdesk.schemas.auth import LoginProfile

logger = structlog.get_logger(__name__)

MAX_CREATE_ATTEMPTS = 3


class UserUuidConflictError(ProjectDeskError):
    """Raised when a freshly generated uuid was taken by a concurrent insert."""

    def __init__(self, uuid: str):
        self.uuid = uuid
        super().__init__(f"User uuid already taken: {uuid}")


def build_user(uuid: str, external_id: str, profile: LoginProfile) -> User:
    """Build a (not yet persisted) user from the login profile, with defaults."""
    return User(
        uuid=uuid,
        external_id=external_id,
        username=(clean_text(profile.nick_name) or DEFAULT_USERNAME)[:MAX_TEXT_LENGTH],
        gender=parse_gender(profile.gender).value,
        avatar_url=profile.avatar_url or None,
        created_at=datetime.now(UTC),
    )


class UserDirectory:
    """Users collection access.

    Sequential ``u-NNN`` ids are allocated by scanning for the highest
    existing id, so concurrent sign-ups can race for the same value. The
    unique constraints on ``uuid`` and ``external_id`` catch the race and
    ``create`` retries with a fresh scan.
    """

    def __init__(self, database: Database):
        self.database = database

    async def find_by_external_id(self, external_id: str) -> User | None:
        async with self.database.session_factory() as session:
            result = await session.execute(select(User).where(User.external_id == external_id))
            return result.scalar_one_or_none()

    async def exists(self, uuid: str) -> bool:
        async with self.database.session_factory() as session:
            result = await session.execute(select(User.uuid).where(User.uuid == uuid))
            return result.scalar_one_or_none() is not None

    async def next_uuid(self) -> str:
        """Return the next sequential uuid, or a timestamp uuid if the scan fails.

        Ids are ordered by length first so ``u-1000`` ranks above ``u-999``.
        """
        try:
            async with self.database.session_factory() as session:
                result = await session.execute(
                    select(User.uuid)
                    .where(User.uuid.like("u-%"))
                    .order_by(func.length(User.uuid).desc(), User.uuid.desc())
                )
                for uuid in result.scalars():
                    if USER_UUID_PATTERN.match(uuid):
                        return next_user_uuid(uuid)
        except (SQLAlchemyError, StoreUnavailableError) as exc:
            fallback = fallback_user_uuid()
            logger.error("user_uuid_scan_failed", error=str(exc), fallback_uuid=fallback)
            return fallback
        return next_user_uuid(None)

    @retry(
        retry=retry_if_exception_type(UserUuidConflictError),
        stop=stop_after_attempt(MAX_CREATE_ATTEMPTS),
        reraise=True,
        before_sleep=lambda rs: logger.warning(
            "user_uuid_conflict_retrying",
            attempt=rs.attempt_number,
        ),
    )
    async def create(self, external_id: str, profile: LoginProfile) -> tuple[User, bool]:
        """Insert a new user for ``external_id``.

        Returns ``(user, True)`` on insert. If a concurrent login created the
        same openid first, returns ``(existing_user, False)`` instead.
        """
        user = build_user(await self.next_uuid(), external_id, profile)

        async with self.database.session_factory() as session:
            session.add(user)
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                existing = await self.find_by_external_id(external_id)
                if existing is not None:
                    logger.info("user_created_concurrently", uuid=existing.uuid)
                    return existing, False
                raise UserUuidConflictError(user.uuid)

        logger.info("user_created", uuid=user.uuid, username=user.username)
        return user, True

    async def sync_profile(self, user: User, profile: LoginProfile, policy: ProfileSyncPolicy) -> User:
        """Apply the login profile to a returning user as ``policy`` allows."""
        changes = profile_changes(policy, user.avatar_url, profile.avatar_url)
        if not changes:
            return user

        async with self.database.session_factory() as session:
            await session.execute(update(User).where(User.uuid == user.uuid).values(**changes))
            await session.commit()

        for column, value in changes.items():
            setattr(user, column, value)
        logger.info("user_profile_synced", uuid=user.uuid, policy=policy.value, fields=sorted(changes))
        return user
