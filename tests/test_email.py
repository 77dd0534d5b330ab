import requests

from appraze.services import email as email_module
from appraze.services.email import EmailClient


class FakeResponse:
    def __init__(self, status_code=202):
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Client Error")


def _capture(monkeypatch, status_code=202):
    calls = []

    def fake_post(url, json=None, headers=None, timeout=None):
        calls.append({"url": url, "json": json, "headers": headers})
        return FakeResponse(status_code)

    monkeypatch.setattr(email_module.requests, "post", fake_post)
    return calls


def test_missing_api_key_is_a_failed_result_not_an_exception(monkeypatch):
    monkeypatch.setattr(email_module.settings.email, "api_key", None)
    calls = _capture(monkeypatch)
    result = EmailClient().send("a@example.com", "Hi", "<p>Hi</p>")
    assert result.success is False
    assert result.error == "email API key is not configured"
    assert calls == []


def test_send_posts_fixed_sender(monkeypatch):
    calls = _capture(monkeypatch)
    result = EmailClient(api_key="key-123", api_url="https://mail.example/send", sender="hello@appraze.io").send(
        "a@example.com", "Hi", "<p>Hi</p>"
    )
    assert result.success is True
    assert calls[0]["url"] == "https://mail.example/send"
    assert calls[0]["json"] == {"to": "a@example.com", "from": "hello@appraze.io", "subject": "Hi", "html": "<p>Hi</p>"}
    assert calls[0]["headers"]["Authorization"] == "Bearer key-123"


def test_provider_error_is_returned_not_raised(monkeypatch):
    _capture(monkeypatch, status_code=500)
    result = EmailClient(api_key="key-123").send("a@example.com", "Hi", "<p>Hi</p>")
    assert result.success is False
    assert "500" in result.error


def test_transport_error_is_returned_not_raised(monkeypatch):
    def boom(*args, **kwargs):
        raise requests.exceptions.Timeout("timed out")

    monkeypatch.setattr(email_module.requests, "post", boom)
    result = EmailClient(api_key="key-123").send_password_changed_email("a@example.com")
    assert result.success is False


def test_review_completion_email_links_to_review(monkeypatch):
    calls = _capture(monkeypatch)
    EmailClient(api_key="key-123").send_review_completion_email("boss@example.com", "Jordan Lee", "H1 2024", "rev-42")
    sent = calls[0]["json"]
    assert sent["to"] == "boss@example.com"
    assert sent["subject"] == "Jordan Lee's Performance Review is Complete"
    assert f"{email_module.settings.email.app_url}/dashboard/reviews/rev-42" in sent["html"]
    assert "H1 2024" in sent["html"]


def test_template_values_are_escaped(monkeypatch):
    calls = _capture(monkeypatch)
    EmailClient(api_key="key-123").send_welcome_email("new@example.com", "<script>alert(1)</script>Sam")
    html = calls[0]["json"]["html"]
    assert "<script>" not in html
    assert "Sam" in html
    assert calls[0]["json"]["subject"] == "Welcome to Appraze!"


def test_team_invite_email(monkeypatch):
    calls = _capture(monkeypatch)
    EmailClient(api_key="key-123").send_team_invite_email(
        "new@example.com", "Sam", "boss@example.com", "Avery", "https://appraze.io/invite/tok"
    )
    sent = calls[0]["json"]
    assert sent["subject"] == "You've been invited to join Appraze"
    assert "https://appraze.io/invite/tok" in sent["html"]
    assert "Avery (boss@example.com)" in sent["html"]
