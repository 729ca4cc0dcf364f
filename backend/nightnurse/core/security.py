"""Admin credential checks for the shared HTTP Basic login."""

import secrets

from backend.nightnurse.core.settings import Settings


def verify_admin_credentials(username: str, password: str, settings: Settings) -> bool:
    # Unconfigured credentials lock the admin area rather than opening it
    if not settings.admin_auth_configured:
        return False
    user_ok = secrets.compare_digest(username.encode("utf-8"), settings.basic_auth_user.encode("utf-8"))
    pass_ok = secrets.compare_digest(password.encode("utf-8"), settings.basic_auth_pass.encode("utf-8"))
    return user_ok and pass_ok
