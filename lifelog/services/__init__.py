from lifelog.services.session_service import SessionController, SessionState
from lifelog.services.journal_service import EntryRepository
from lifelog.services.notification_service import NotificationService
from lifelog.services.data_service import DataService


__all__ = [
    "SessionController",
    "SessionState",
    "EntryRepository",
    "NotificationService",
    "DataService",
]
