"""Tests for provider error mapping."""

from lifelog.errors import (
    AuthError,
    EmailAlreadyInUse,
    NetworkFailure,
    RateLimited,
    ValidationError,
    WrongCredential,
    map_auth_error,
)
from lifelog.providers.base import ProviderError


def test_known_codes_map_to_typed_errors():
    err = map_auth_error(ProviderError("wrong-password", "INVALID_PASSWORD"))
    assert isinstance(err, WrongCredential)
    assert err.status_code == 401
    assert err.code == "wrong-password"

    assert isinstance(map_auth_error(ProviderError("email-already-in-use", "x")), EmailAlreadyInUse)
    assert isinstance(map_auth_error(ProviderError("too-many-requests", "x")), RateLimited)
    assert isinstance(map_auth_error(ProviderError("network-request-failed", "x")), NetworkFailure)


def test_invalid_email_is_validation_error():
    err = map_auth_error(ProviderError("invalid-email", "bad"))
    assert isinstance(err, ValidationError)
    assert err.message == "Please enter a valid email address."


def test_lifelog_errors_pass_through():
    original = WrongCredential()
    assert map_auth_error(original) is original


def test_unknown_error_gets_generic_message_with_hint():
    err = map_auth_error(ProviderError("weird", "email quota exceeded"))
    assert isinstance(err, AuthError)
    assert err.message == "Authentication error: email quota exceeded. Please check your email address."

    err = map_auth_error(RuntimeError("boom"))
    assert err.message == "Authentication error: boom. Please try again."


def test_empty_message_falls_back_to_default():
    err = map_auth_error(RuntimeError())
    assert err.message == "An unexpected error occurred. Please try again."
