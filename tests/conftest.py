"""In-memory providers shared by the test suite."""

from __future__ import annotations

import copy
import uuid

import pytest
from jose import jwt

from lifelog.context import AppContext
from lifelog.models.user import Identity
from lifelog.providers.base import AuthProvider, DocumentStore, ProviderError, PushProvider
from lifelog.supabase_rest import resolve_timestamps

JWT_SECRET = "test-secret"
CRON_SECRET = "cron-secret"


class FakeAuthProvider(AuthProvider):
    """Email/password accounts held in a dict; records every call made."""

    def __init__(self):
        self.accounts: dict[str, dict] = {}
        self.current: Identity | None = None
        self.calls: list[str] = []
        self.verification_emails: list[str] = []
        self.reset_emails: list[str] = []
        self.codes: dict[str, str] = {}
        self.callbacks: list = []
        self.unsubscribe_count = 0
        # GoTrue refuses unverified logins instead of returning the user
        self.reject_unverified = False

    # helpers
    def add_account(self, email, password, verified=False, name=None) -> Identity:
        uid = uuid.uuid4().hex
        self.accounts[email] = {"uid": uid, "password": password, "verified": verified, "name": name}
        return self._identity(email)

    def _identity(self, email) -> Identity:
        account = self.accounts[email]
        return Identity(
            uid=account["uid"],
            email=email,
            display_name=account["name"],
            email_verified=account["verified"],
        )

    def emit(self, identity: Identity | None) -> None:
        self.current = identity
        for callback in list(self.callbacks):
            callback(identity)

    # AuthProvider
    async def create_account(self, email, password, display_name=None):
        self.calls.append("create_account")
        if email in self.accounts:
            raise ProviderError("email-already-in-use", "exists")
        identity = self.add_account(email, password, name=display_name)
        self.emit(identity)
        return identity

    async def sign_in(self, email, password):
        self.calls.append("sign_in")
        account = self.accounts.get(email)
        if account is None:
            raise ProviderError("user-not-found", "no user")
        if account["password"] != password:
            raise ProviderError("wrong-password", "bad password")
        if self.reject_unverified and not account["verified"]:
            raise ProviderError("email-not-verified", "Email not confirmed")
        identity = self._identity(email)
        self.emit(identity)
        return identity

    async def sign_out(self):
        self.calls.append("sign_out")
        self.emit(None)

    async def send_password_reset(self, email):
        self.calls.append("send_password_reset")
        self.reset_emails.append(email)

    async def send_verification_email(self, identity):
        self.calls.append("send_verification_email")
        code = uuid.uuid4().hex
        self.codes[code] = identity.email
        self.verification_emails.append(identity.email)

    async def apply_verification_code(self, code):
        self.calls.append("apply_verification_code")
        email = self.codes.pop(code, None)
        if email is None:
            raise ProviderError("invalid-action-code", "The verification code is invalid")
        self.accounts[email]["verified"] = True

    async def lookup_sign_in_methods(self, email):
        self.calls.append("lookup_sign_in_methods")
        return ["password"] if email in self.accounts else []

    async def reload(self):
        self.calls.append("reload")
        if self.current is None:
            return None
        return self._identity(self.current.email)

    def on_auth_state_changed(self, callback):
        self.callbacks.append(callback)
        callback(self.current)

        def unsubscribe():
            self.unsubscribe_count += 1
            self.callbacks.remove(callback)

        return unsubscribe

    def access_token(self):
        if self.current is None:
            return None
        return make_token(self.current.uid)


class FakeDocumentStore(DocumentStore):
    def __init__(self):
        self.collections: dict[str, dict[str, dict]] = {}
        self.fail_on: set[str] = set()

    def _check(self, operation):
        if operation in self.fail_on:
            raise ProviderError("permission-denied", f"{operation} rejected")

    def _docs(self, collection):
        return self.collections.setdefault(collection, {})

    async def get(self, collection, key):
        self._check("get")
        doc = self._docs(collection).get(key)
        return copy.deepcopy(doc) if doc is not None else None

    async def set(self, collection, key, data, merge=False):
        self._check("set")
        docs = self._docs(collection)
        data = resolve_timestamps(data)
        if merge and key in docs:
            docs[key].update(data)
        else:
            docs[key] = {**data, "id": key}
        return copy.deepcopy(docs[key])

    async def update(self, collection, key, data):
        self._check("update")
        docs = self._docs(collection)
        if key not in docs:
            raise ProviderError("not-found", f"No document {collection}/{key}")
        docs[key].update(resolve_timestamps(data))
        return copy.deepcopy(docs[key])

    async def add(self, collection, data):
        self._check("add")
        key = uuid.uuid4().hex
        return await self.set(collection, key, data)

    async def query(self, collection, filters=None, order_by=None, descending=False):
        self._check("query")
        rows = list(self._docs(collection).values())
        for field, op, value in filters or []:
            if op == "==":
                rows = [r for r in rows if r.get(field) == value]
            else:
                rows = [r for r in rows if r.get(field) != value]
        if order_by:
            rows.sort(key=lambda r: r.get(order_by) or "", reverse=descending)
        return copy.deepcopy(rows)


class FakePushProvider(PushProvider):
    def __init__(self):
        self.sent: list[dict] = []
        self.fail_tokens: set[str] = set()

    async def send(self, token, title, body, data=None, link=None):
        if token in self.fail_tokens:
            raise ProviderError("messaging/registration-token-not-registered", "token expired")
        self.sent.append({"token": token, "title": title, "body": body, "data": data, "link": link})
        return f"msg-{len(self.sent)}"


def make_token(uid: str, secret: str = JWT_SECRET) -> str:
    return jwt.encode({"sub": uid, "aud": "authenticated"}, secret, algorithm="HS256")


def simple_tagger(text: str) -> list[tuple[str, str]]:
    """Treats every word as a noun."""
    return [(word, "NN") for word in text.split()]


@pytest.fixture()
def auth() -> FakeAuthProvider:
    return FakeAuthProvider()


@pytest.fixture()
def store() -> FakeDocumentStore:
    return FakeDocumentStore()


@pytest.fixture()
def push() -> FakePushProvider:
    return FakePushProvider()


@pytest.fixture()
def context(auth, store, push) -> AppContext:
    return AppContext(
        store=store,
        auth_factory=lambda: auth,
        push=push,
        tagger=simple_tagger,
        jwt_secret=JWT_SECRET,
        cron_secret=CRON_SECRET,
    )
