import uuid
from types import SimpleNamespace

import structlog
from structlog.testing import CapturingLogger

from core import auth


async def test_forgot_password_does_not_log_the_token(monkeypatch):
    captured = CapturingLogger()
    logger = structlog.wrap_logger(captured, processors=[lambda _, __, event_dict: event_dict])
    monkeypatch.setattr(auth, "logger", logger)
    user = SimpleNamespace(id=uuid.uuid4(), email="clerk@example.com")

    await auth.UserManager(None).on_after_forgot_password(user, "reset-token-123")

    assert [call.kwargs["event"] for call in captured.calls] == ["password reset requested"]
    assert captured.calls[0].kwargs["user_id"] == str(user.id)
    assert "reset-token-123" not in repr(captured.calls)
    assert "clerk@example.com" not in repr(captured.calls)
