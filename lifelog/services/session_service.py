"""
session_service.py — Session Controller
Single source of truth for who is signed in. Mediates sign-up, sign-in,
sign-out, password reset and email verification over an AuthProvider and
mirrors the provider's auth-state subscription, which always has the last word.

State machine:
    UNKNOWN ──verified user──▶ AUTHENTICATED
    UNKNOWN / AUTHENTICATED ──no user / unverified user──▶ UNAUTHENTICATED
An unverified user reported by the provider is signed out automatically.
"""

import asyncio
import functools
import logging
import re
from enum import Enum
from typing import Callable

from lifelog.config import PROFILES_TABLE
from lifelog.errors import (
    AccountNotFound,
    AuthError,
    EmailAlreadyInUse,
    EmailNotVerified,
    LifelogError,
    RepositoryError,
    ValidationError,
    map_auth_error,
)
from lifelog.models.user import Identity, default_profile_preferences
from lifelog.providers.base import SERVER_TIMESTAMP, AuthProvider, DocumentStore, ProviderError, Unsubscribe

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6


class SessionState(str, Enum):
    UNKNOWN = "unknown"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


SessionListener = Callable[[SessionState, Identity | None], None]


def validate_email(email: str) -> None:
    if not email or not EMAIL_RE.match(email):
        raise ValidationError("Please enter a valid email address.")


def validate_password(password: str) -> None:
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password should be at least {MIN_PASSWORD_LENGTH} characters long.")


def _identity_operation(func):
    """Toggle `loading`, cache the mapped error on `error`, and re-raise it."""

    @functools.wraps(func)
    async def wrapper(self, *args, **kwargs):
        self.loading = True
        self.error = None
        try:
            return await func(self, *args, **kwargs)
        except LifelogError as e:
            self.error = e.message
            raise
        except Exception as e:
            err = map_auth_error(e)
            self.error = err.message
            raise err from e
        finally:
            self.loading = False

    return wrapper


class SessionController:
    def __init__(self, auth: AuthProvider, store: DocumentStore, profiles_table: str = PROFILES_TABLE):
        self.auth = auth
        self.store = store
        self.profiles_table = profiles_table

        self.user: Identity | None = None
        self.state = SessionState.UNKNOWN
        self.loading = True
        self.error: str | None = None
        self.verification_email_sent = False

        self._unsubscribe: Unsubscribe | None = None
        self._listeners: list[SessionListener] = []
        # sign_in / sign_up sign unverified users out themselves
        self._handling_verification = 0
        self._pending: set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self) -> None:
        """Register the provider subscription; idempotent."""
        if self._unsubscribe is not None:
            return
        logger.info("Initializing auth state...")
        self._unsubscribe = self.auth.on_auth_state_changed(self._on_auth_state)

    def close(self) -> None:
        """Tear down the provider subscription exactly once."""
        unsubscribe, self._unsubscribe = self._unsubscribe, None
        if unsubscribe is not None:
            unsubscribe()
        self._listeners.clear()

    async def aclose(self) -> None:
        self.close()
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    def subscribe(self, listener: SessionListener) -> Unsubscribe:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def is_authenticated(self) -> bool:
        return self.state is SessionState.AUTHENTICATED

    def clear_error(self) -> None:
        self.error = None

    # ------------------------------------------------------------------
    # Provider callback
    # ------------------------------------------------------------------
    def _on_auth_state(self, identity: Identity | None) -> None:
        self.loading = False
        if identity is not None and not identity.email_verified and not self._handling_verification:
            logger.warning(f"Unverified session for {identity.uid}; forcing sign-out")
            self._run_in_background(self._forced_sign_out())
        self._set_identity(identity)

    async def _forced_sign_out(self) -> None:
        try:
            await self.auth.sign_out()
        except Exception as e:
            logger.error(f"Forced sign-out failed: {e}")

    def _run_in_background(self, coro) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(coro)
            return
        task = loop.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    def _set_identity(self, identity: Identity | None) -> None:
        if identity is not None and identity.email_verified:
            self.user = identity
            self.state = SessionState.AUTHENTICATED
        else:
            self.user = None
            self.state = SessionState.UNAUTHENTICATED
        for listener in list(self._listeners):
            try:
                listener(self.state, self.user)
            except Exception:
                logger.exception("Session listener failed")

    # ------------------------------------------------------------------
    # Profile document
    # ------------------------------------------------------------------
    async def _create_profile(self, identity: Identity, name: str) -> None:
        try:
            await self.store.set(self.profiles_table, identity.uid, {
                "email": identity.email,
                "name": name,
                "created_at": SERVER_TIMESTAMP,
                "last_login": SERVER_TIMESTAMP,
                "preferences": default_profile_preferences(),
            })
            logger.info(f"User document created successfully: {identity.uid}")
        except Exception as e:
            logger.error(f"Error creating user document: {e}")
            raise RepositoryError("Failed to create user profile. Please try again.") from e

    async def _reject_unverified(self, identity: Identity) -> None:
        """Resend the verification link (best-effort) and drop the session."""
        try:
            await self.auth.send_verification_email(identity)
        except Exception as e:
            logger.warning(f"Could not resend verification email: {e}")
        await self.auth.sign_out()
        self._set_identity(None)

    async def _touch_last_login(self, identity: Identity) -> None:
        try:
            await self.store.update(self.profiles_table, identity.uid, {"last_login": SERVER_TIMESTAMP})
        except Exception as e:
            logger.warning(f"Could not update last login for {identity.uid}: {e}")

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    @_identity_operation
    async def sign_up(self, email: str, password: str, name: str) -> Identity:
        logger.info(f"Attempting to create user account... {email}")
        validate_email(email)
        validate_password(password)

        methods = await self.auth.lookup_sign_in_methods(email)
        if methods:
            raise EmailAlreadyInUse()

        self._handling_verification += 1
        try:
            identity = await self.auth.create_account(email, password, display_name=name)
            await self._create_profile(identity, name)
            await self.auth.send_verification_email(identity)
            self.verification_email_sent = True
            # a session only becomes usable once the email is verified
            await self.auth.sign_out()
        finally:
            self._handling_verification -= 1

        self._set_identity(None)
        return identity

    @_identity_operation
    async def sign_in(self, email: str, password: str) -> Identity:
        logger.info(f"Attempting to sign in... {email}")
        validate_email(email)

        self._handling_verification += 1
        try:
            try:
                identity = await self.auth.sign_in(email, password)
            except ProviderError as e:
                # some providers refuse unverified logins outright instead of returning the user
                if e.code != "email-not-verified":
                    raise
                await self._reject_unverified(Identity(uid="", email=email))
                raise EmailNotVerified() from e
            if not identity.email_verified:
                await self._reject_unverified(identity)
                raise EmailNotVerified()
        finally:
            self._handling_verification -= 1

        await self._touch_last_login(identity)
        self._set_identity(identity)
        logger.info(f"Sign in successful: {identity.uid}")
        return identity

    @_identity_operation
    async def sign_out(self) -> None:
        await self.auth.sign_out()
        self._set_identity(None)

    @_identity_operation
    async def reset_password(self, email: str) -> None:
        validate_email(email)
        methods = await self.auth.lookup_sign_in_methods(email)
        if not methods:
            raise AccountNotFound()
        await self.auth.send_password_reset(email)

    @_identity_operation
    async def send_verification_email(self) -> None:
        identity = self.user or await self.auth.reload()
        if identity is None:
            raise AuthError("Please sign in first.", code="no-current-user")
        await self.auth.send_verification_email(identity)
        self.verification_email_sent = True
        self._set_identity(await self.auth.reload())

    @_identity_operation
    async def verify_email(self, code: str) -> Identity | None:
        if not code:
            raise ValidationError("Verification code is missing.")
        await self.auth.apply_verification_code(code)
        identity = await self.auth.reload()
        self._set_identity(identity)
        return identity

    @_identity_operation
    async def reload(self) -> Identity | None:
        identity = await self.auth.reload()
        self._set_identity(identity)
        return identity
