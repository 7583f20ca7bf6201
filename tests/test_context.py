"""Tests for AppContext wiring."""

import pytest

from lifelog import context as context_module
from lifelog.services.notification_service import NotificationService


def test_build_default_context_requires_supabase(monkeypatch):
    monkeypatch.setattr(context_module, "is_supabase_configured", lambda: False)
    with pytest.raises(ValueError):
        context_module.build_default_context()


def test_context_builds_services(context, store, push):
    assert isinstance(context.notifications, NotificationService)
    assert context.notifications.push is push
    assert context.entry_repository().store is store
    assert context.data_service().repository.store is store
