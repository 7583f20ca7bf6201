"""
context.py — Application context
One object owning the document store, push provider and auth-provider
factory. Built once per app and handed to route handlers; tests build it
with in-memory fakes.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable

from lifelog.config import CRON_SECRET, SUPABASE_JWT_SECRET, is_firebase_configured, is_supabase_configured
from lifelog.providers.base import AuthProvider, DocumentStore, PushProvider
from lifelog.services.data_service import DataService
from lifelog.services.journal_service import EntryRepository
from lifelog.services.notification_service import NotificationService
from lifelog.services.session_service import SessionController

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    store: DocumentStore
    auth_factory: Callable[[], AuthProvider]
    push: PushProvider | None = None
    # part-of-speech tagger for word clouds; None uses TextBlob
    tagger: Callable | None = None
    jwt_secret: str = SUPABASE_JWT_SECRET
    cron_secret: str = CRON_SECRET
    notifications: NotificationService = field(init=False)

    def __post_init__(self):
        self.notifications = NotificationService(self.store, self.push)

    def session_controller(self) -> SessionController:
        """A started controller over a fresh auth session; close it when done."""
        controller = SessionController(self.auth_factory(), self.store)
        controller.start()
        return controller

    def entry_repository(self) -> EntryRepository:
        return EntryRepository(self.store)

    def data_service(self) -> DataService:
        return DataService(self.entry_repository(), self.notifications)


def build_default_context() -> AppContext:
    """Context wired to Supabase and, when configured, Firebase Cloud Messaging."""
    from lifelog.providers.supabase_auth import SupabaseAuthProvider
    from lifelog.providers.supabase_store import SupabaseDocumentStore

    if not is_supabase_configured():
        raise ValueError("SUPABASE_URL, SUPABASE_ANON_KEY and SUPABASE_SERVICE_ROLE_KEY must be set in environment variables")

    store = SupabaseDocumentStore()
    push = None
    if is_firebase_configured():
        from lifelog.providers.firebase_push import FirebasePushProvider
        push = FirebasePushProvider()
    else:
        logger.warning("Firebase is not configured; push reminders are disabled.")

    return AppContext(
        store=store,
        auth_factory=lambda: SupabaseAuthProvider(store),
        push=push,
    )
