"""Sign-in, sign-up and sign-out against Supabase auth."""

from typing import Optional
from pydantic import BaseModel

from panoproperty.models.profile import Role
from panoproperty.models.session import UserSession
from panoproperty.services.local_store import PendingRoleStore
from panoproperty.services.supabase_client import SupabaseClient, update_profile_role
from panoproperty.utils.config import AppConfig
from panoproperty.utils.errors import SupabaseError
from panoproperty.utils.logging import get_structured_logger, mask_user_id, mask_sensitive_data

logger = get_structured_logger(__name__)

CONFIRM_EMAIL_NOTICE = "Check your email to confirm your account, then sign in."


class AuthResult(BaseModel):
    """Outcome of an auth action, with errors as display text."""
    session: Optional[UserSession] = None
    error: Optional[str] = None
    notice: Optional[str] = None
    redirect_url: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _auth_error(error: Exception) -> str:
    message = getattr(error, "message", None)
    return str(message) if message else str(error)


async def sign_in_with_password(email: str, password: str) -> AuthResult:
    async with SupabaseClient() as client:
        try:
            response = client.auth.sign_in_with_password({"email": email, "password": password})
        except Exception as e:
            logger.warning("Password sign-in failed", email=mask_sensitive_data(email), error=_auth_error(e))
            return AuthResult(error=_auth_error(e))

    session = UserSession.from_auth_session(response.session)
    logger.info("Signed in", user_id=mask_user_id(session.user_id) if session else None)
    return AuthResult(session=session)


async def sign_up(
    email: str,
    password: str,
    role: str = Role.BUYER.value,
    full_name: str = "",
    pending_roles: Optional[PendingRoleStore] = None,
) -> AuthResult:
    """Create an account with role and name as user metadata.

    When the project returns a session straight away the profile role is
    written now; when email confirmation is required the role is staged
    and applied after the first sign-in.
    """
    role = Role(role).value
    async with SupabaseClient() as client:
        try:
            response = client.auth.sign_up({
                "email": email,
                "password": password,
                "options": {"data": {"role": role, "full_name": full_name}},
            })
        except Exception as e:
            logger.warning("Sign-up failed", email=mask_sensitive_data(email), error=_auth_error(e))
            return AuthResult(error=_auth_error(e))

    session = UserSession.from_auth_session(response.session)
    if session is not None:
        try:
            await update_profile_role(session.user_id, role)
        except SupabaseError as e:
            logger.error("Failed to store role after sign-up", user_id=mask_user_id(session.user_id), error=str(e))
            return AuthResult(session=session, error=str(e))
        logger.info("Signed up", user_id=mask_user_id(session.user_id), role=role)
        return AuthResult(session=session)

    (pending_roles or PendingRoleStore()).stage(role)
    logger.info("Sign-up awaiting email confirmation", role=role)
    return AuthResult(notice=CONFIRM_EMAIL_NOTICE)


async def sign_in_with_oauth(
    role: str = Role.BUYER.value,
    provider: Optional[str] = None,
    redirect_to: Optional[str] = None,
    pending_roles: Optional[PendingRoleStore] = None,
) -> AuthResult:
    """Start a provider sign-in; the caller sends the user to ``redirect_url``."""
    (pending_roles or PendingRoleStore()).stage(role)
    provider = provider or AppConfig.OAUTH_PROVIDER

    async with SupabaseClient() as client:
        try:
            response = client.auth.sign_in_with_oauth({
                "provider": provider,
                "options": {"redirect_to": redirect_to or AppConfig.SITE_URL},
            })
        except Exception as e:
            logger.warning("OAuth sign-in failed", provider=provider, error=_auth_error(e))
            return AuthResult(error=_auth_error(e))

    logger.info("OAuth redirect issued", provider=provider, role=role)
    return AuthResult(redirect_url=response.url)


async def sign_out() -> AuthResult:
    async with SupabaseClient() as client:
        try:
            client.auth.sign_out()
        except Exception as e:
            logger.warning("Sign-out failed", error=_auth_error(e))
            return AuthResult(error=_auth_error(e))
    logger.info("Signed out")
    return AuthResult()
