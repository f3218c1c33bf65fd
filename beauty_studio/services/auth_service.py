import secrets

from beauty_studio.core.config import settings
from beauty_studio.core.errors import AuthError
from beauty_studio.core.logger import logger
from beauty_studio.core.security import create_access_token
from beauty_studio.models.auth import AdminUser, LoginResponse

ADMIN_USER_ID = "admin"


def get_admin_user() -> AdminUser:
    return AdminUser(
        id=ADMIN_USER_ID,
        name=settings.ADMIN_NAME,
        email=settings.ADMIN_EMAIL,
        role="admin",
    )


def login(email: str, password: str) -> LoginResponse:
    """Checks the configured admin credential and issues a token."""
    email_ok = secrets.compare_digest(email.strip().lower().encode(), settings.ADMIN_EMAIL.lower().encode())
    password_ok = secrets.compare_digest(password.encode(), settings.ADMIN_PASSWORD.encode())
    if not (email_ok and password_ok):
        logger.warning(f"🔒 Failed admin login for {email}")
        raise AuthError("Invalid credentials")

    user = get_admin_user()
    logger.info(f"🔓 Admin login: {user.email}")
    return LoginResponse(user=user, token=create_access_token(user))
