"""Authentication dependency for the admin area."""

from fastapi import Depends
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from backend.nightnurse.core.errors import AuthError
from backend.nightnurse.core.security import verify_admin_credentials
from backend.nightnurse.core.settings import Settings
from backend.nightnurse.dependencies.services import get_app_settings

security_scheme = HTTPBasic(auto_error=False)


def require_admin(
    credentials: HTTPBasicCredentials | None = Depends(security_scheme),
    settings: Settings = Depends(get_app_settings),
) -> str:
    if credentials is None:
        raise AuthError("Missing admin credentials")
    if not verify_admin_credentials(credentials.username, credentials.password, settings):
        raise AuthError("Invalid admin credentials")
    return credentials.username
