"""Profile rules for WeChat users.

Pure domain functions. No DB access.
"""

from enum import StrEnum

DEFAULT_USERNAME = "微信用户"


class Gender(StrEnum):
    MALE = "male"
    FEMALE = "female"
    UNSPECIFIED = "unspecified"


class ProfileSyncPolicy(StrEnum):
    """What a returning user's login may change on the stored profile.

    FREEZE: profile fields are written once at creation and never touched again.
    REFRESH_AVATAR: ``avatar_url`` is overwritten with the client's value on
    every login. WeChat avatar links are temporary, so clients that render the
    stored URL need the fresh one.
    """

    FREEZE = "freeze"
    REFRESH_AVATAR = "refresh_avatar"


def parse_gender(code: object) -> Gender:
    """Map the WeChat numeric gender hint (1 male, 2 female) to a Gender."""
    if isinstance(code, bool):
        return Gender.UNSPECIFIED
    if code == 1:
        return Gender.MALE
    if code == 2:
        return Gender.FEMALE
    return Gender.UNSPECIFIED


def profile_changes(
    policy: ProfileSyncPolicy,
    stored_avatar_url: str | None,
    incoming_avatar_url: str | None,
) -> dict[str, str]:
    """Return the column updates a login should apply to an existing user."""
    if policy == ProfileSyncPolicy.REFRESH_AVATAR and incoming_avatar_url:
        if incoming_avatar_url != stored_avatar_url:
            return {"avatar_url": incoming_avatar_url}
    return {}
