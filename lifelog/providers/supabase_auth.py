import logging

from supabase import AuthError as SupabaseAuthError, AuthRetryableError, AuthSessionMissingError, Client

from lifelog.config import PROFILES_TABLE
from lifelog.models.user import Identity
from lifelog.providers.base import AuthProvider, AuthStateCallback, DocumentStore, ProviderError, Unsubscribe
from lifelog.supabase_client import create_session_client

logger = logging.getLogger(__name__)

# GoTrue error codes → provider-neutral codes understood by errors.map_auth_error
_SUPABASE_CODES = {
    "user_already_exists": "email-already-in-use",
    "email_exists": "email-already-in-use",
    "invalid_credentials": "wrong-password",
    "email_not_confirmed": "email-not-verified",
    "user_not_found": "user-not-found",
    "weak_password": "weak-password",
    "email_address_invalid": "invalid-email",
    "validation_failed": "invalid-email",
    "over_request_rate_limit": "too-many-requests",
    "over_email_send_rate_limit": "too-many-requests",
    "user_banned": "user-disabled",
    "signup_disabled": "operation-not-allowed",
    "email_provider_disabled": "operation-not-allowed",
}


def _identity(user) -> Identity | None:
    if user is None:
        return None
    metadata = getattr(user, "user_metadata", None) or {}
    created_at = getattr(user, "created_at", None)
    return Identity(
        uid=str(user.id),
        email=user.email,
        display_name=metadata.get("name"),
        email_verified=getattr(user, "email_confirmed_at", None) is not None,
        created_at=created_at.isoformat() if hasattr(created_at, "isoformat") else created_at,
    )


def _provider_error(e: Exception) -> ProviderError:
    if isinstance(e, AuthRetryableError):
        return ProviderError("network-request-failed", str(e))
    raw_code = getattr(e, "code", None)
    return ProviderError(_SUPABASE_CODES.get(raw_code, raw_code), getattr(e, "message", None) or str(e))


class SupabaseAuthProvider(AuthProvider):
    """AuthProvider backed by the Supabase GoTrue client of a single session."""

    def __init__(self, store: DocumentStore, client: Client | None = None):
        self.client = client or create_session_client()
        self.store = store
        # GoTrue mails the confirmation link on sign-up itself
        self._confirmation_sent_to: str | None = None

    async def create_account(self, email: str, password: str, display_name: str | None = None) -> Identity:
        try:
            resp = self.client.auth.sign_up({
                "email": email,
                "password": password,
                "options": {"data": {"name": display_name} if display_name else {}},
            })
        except SupabaseAuthError as e:
            raise _provider_error(e) from e
        if resp.user is None:
            raise ProviderError(None, "Failed to retrieve user after sign up.")
        # GoTrue hides existing accounts behind an empty identities list
        if getattr(resp.user, "identities", None) == []:
            raise ProviderError("email-already-in-use", "User already registered")
        if getattr(resp.user, "confirmation_sent_at", None) is not None:
            self._confirmation_sent_to = email
        return _identity(resp.user)

    async def sign_in(self, email: str, password: str) -> Identity:
        try:
            resp = self.client.auth.sign_in_with_password({"email": email, "password": password})
        except SupabaseAuthError as e:
            raise _provider_error(e) from e
        return _identity(resp.user)

    async def sign_out(self) -> None:
        try:
            self.client.auth.sign_out()
        except SupabaseAuthError as e:
            raise _provider_error(e) from e

    async def send_password_reset(self, email: str) -> None:
        try:
            self.client.auth.reset_password_for_email(email)
        except SupabaseAuthError as e:
            raise _provider_error(e) from e

    async def send_verification_email(self, identity: Identity) -> None:
        if identity.email == self._confirmation_sent_to:
            self._confirmation_sent_to = None
            return
        try:
            self.client.auth.resend({"type": "signup", "email": identity.email})
        except SupabaseAuthError as e:
            raise _provider_error(e) from e

    async def apply_verification_code(self, code: str) -> None:
        try:
            self.client.auth.verify_otp({"token_hash": code, "type": "email"})
        except SupabaseAuthError as e:
            raise _provider_error(e) from e

    async def lookup_sign_in_methods(self, email: str) -> list[str]:
        # GoTrue has no public lookup; a profile row exists for every account
        rows = await self.store.query(PROFILES_TABLE, filters=[("email", "==", email)])
        return ["password"] if rows else []

    async def reload(self) -> Identity | None:
        try:
            resp = self.client.auth.get_user()
        except AuthSessionMissingError:
            return None
        except SupabaseAuthError as e:
            raise _provider_error(e) from e
        return _identity(resp.user) if resp else None

    def on_auth_state_changed(self, callback: AuthStateCallback) -> Unsubscribe:
        def _listener(event, session):
            logger.info(f"Auth state change: {event}")
            callback(_identity(session.user) if session else None)

        subscription = self.client.auth.on_auth_state_change(_listener)
        return subscription.unsubscribe

    def access_token(self) -> str | None:
        session = self.client.auth.get_session()
        return session.access_token if session else None
