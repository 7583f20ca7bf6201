import logging

import firebase_admin
from firebase_admin import credentials, exceptions, messaging

from lifelog.config import APP_URL, FIREBASE_CLIENT_EMAIL, FIREBASE_PRIVATE_KEY, FIREBASE_PROJECT_ID
from lifelog.providers.base import ProviderError, PushProvider

logger = logging.getLogger(__name__)


def _get_app() -> firebase_admin.App:
    try:
        return firebase_admin.get_app()
    except ValueError:
        cred = credentials.Certificate({
            "type": "service_account",
            "project_id": FIREBASE_PROJECT_ID,
            "client_email": FIREBASE_CLIENT_EMAIL,
            "private_key": FIREBASE_PRIVATE_KEY,
            "token_uri": "https://oauth2.googleapis.com/token",
        })
        app = firebase_admin.initialize_app(cred)
        logger.info("Firebase Admin initialized successfully")
        return app


def _fcm_options(link: str | None) -> messaging.WebpushFCMOptions | None:
    # FCM only accepts absolute HTTPS links
    if not link:
        return None
    if not link.startswith("https://"):
        if not APP_URL.startswith("https://"):
            return None
        link = APP_URL.rstrip("/") + link
    return messaging.WebpushFCMOptions(link=link)


class FirebasePushProvider(PushProvider):
    """Web push through Firebase Cloud Messaging."""

    def __init__(self, icon: str = "/icon.png", badge: str = "/badge.png"):
        self.icon = icon
        self.badge = badge

    async def send(
        self,
        token: str,
        title: str,
        body: str,
        data: dict[str, str] | None = None,
        link: str | None = None,
    ) -> str:
        message = messaging.Message(
            notification=messaging.Notification(title=title, body=body),
            webpush=messaging.WebpushConfig(
                notification=messaging.WebpushNotification(
                    icon=self.icon,
                    badge=self.badge,
                    actions=[messaging.WebpushNotificationAction(action="open", title="Write Now")],
                ),
                fcm_options=_fcm_options(link),
            ),
            data=data or {},
            token=token,
        )
        try:
            return messaging.send(message, app=_get_app())
        except exceptions.FirebaseError as e:
            raise ProviderError(str(e.code), str(e)) from e
