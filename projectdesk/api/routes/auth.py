"""Login route: WeChat code exchange and session token."""

from fastapi import APIRouter, Depends

from projectdesk.api.deps import get_auth_service
from projectdesk.api.errors import raise_for_failure, require_fields
from projectdesk.domain.results import FailureReason
from projectdesk.schemas.auth import LoginPayload, LoginProfile, LoginRequest
from projectdesk.services.auth_service import AuthService

router = APIRouter()


@router.post("/login", response_model=LoginPayload)
async def login(body: LoginRequest, auth_service: AuthService = Depends(get_auth_service)):
    """Log a mini-program user in.

    Raises:
        HTTPException(400): Missing code, or WeChat rejected it
    """
    require_fields(body, "code", error=FailureReason.MISSING_CODE.value)

    profile = LoginProfile(nick_name=body.nick_name, avatar_url=body.avatar_url, gender=body.gender)
    result = await auth_service.login(body.code, profile)
    raise_for_failure(result)
    return result.data
