"""FastAPI dependencies wiring services to the app's store handle.

Override these in tests via ``app.dependency_overrides``.
"""

from fastapi import Depends, Request

from projectdesk.core.config import get_settings
from projectdesk.core.tokens import TokenIssuer
from projectdesk.db.base import Database
from projectdesk.integrations.wechat import WeChatClient
from projectdesk.services.auth_service import AuthService
from projectdesk.services.project_service import ProjectService


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_identity_client() -> WeChatClient:
    return WeChatClient.from_settings(get_settings())


def get_token_issuer() -> TokenIssuer:
    return TokenIssuer.from_settings(get_settings())


def get_auth_service(
    database: Database = Depends(get_database),
    identity_client: WeChatClient = Depends(get_identity_client),
    token_issuer: TokenIssuer = Depends(get_token_issuer),
) -> AuthService:
    return AuthService(
        database=database,
        identity_client=identity_client,
        token_issuer=token_issuer,
        profile_policy=get_settings().profile_sync_policy,
    )


def get_project_service(database: Database = Depends(get_database)) -> ProjectService:
    return ProjectService(database)
