"""
Suitability email tests. SMTP is always mocked.
"""

from unittest.mock import MagicMock, patch

from utils.email_notification import (
    build_suitability_email,
    get_application_url,
    send_smtp_email,
    send_suitability_email,
)

BREAKDOWN = [{"key": "academic_level", "points": 20}, {"key": "gpa", "points": 15}]


def test_build_email_includes_score_and_labels():
    subject, html_body, text_body = build_suitability_email(
        full_name="Jane Doe",
        scholarship_name="STEM Excellence Award",
        suitability_percent=35,
        breakdown=BREAKDOWN,
        application_url="http://localhost:5000/applications/7",
    )
    assert "STEM Excellence Award" in subject
    assert "35%" in html_body
    assert "Academic level: 20" in text_body
    assert "GPA: 15" in text_body
    assert "/applications/7" in text_body


def test_application_url_uses_app_url(monkeypatch):
    monkeypatch.setenv("APP_URL", "https://apply.example.org")
    assert get_application_url(3) == "https://apply.example.org/applications/3"


def test_unconfigured_smtp_returns_false(monkeypatch):
    monkeypatch.delenv("EMAIL", raising=False)
    monkeypatch.delenv("SMTP_PASSWORD", raising=False)
    assert send_smtp_email("jane@example.com", "s", "<p>h</p>", "t") is False


@patch("utils.email_notification.smtplib.SMTP")
def test_smtp_send(mock_smtp, monkeypatch):
    monkeypatch.setenv("EMAIL", "noreply@example.org")
    monkeypatch.setenv("SMTP_PASSWORD", "abcd efgh")
    server = MagicMock()
    mock_smtp.return_value = server

    assert send_smtp_email("jane@example.com", "s", "<p>h</p>", "t") is True
    server.starttls.assert_called_once()
    server.login.assert_called_once_with("noreply@example.org", "abcdefgh")
    server.send_message.assert_called_once()
    server.quit.assert_called_once()


@patch("utils.email_notification.smtplib.SMTP", side_effect=OSError("connection refused"))
def test_suitability_email_never_raises(mock_smtp, monkeypatch):
    monkeypatch.setenv("EMAIL", "noreply@example.org")
    monkeypatch.setenv("SMTP_PASSWORD", "secret")
    sent = send_suitability_email(
        user_email="jane@example.com",
        full_name="Jane Doe",
        scholarship_name="STEM Excellence Award",
        suitability_percent=80,
        breakdown=BREAKDOWN,
        application_id=1,
    )
    assert sent is False


def test_applicant_text_is_escaped_in_html():
    _, html_body, text_body = build_suitability_email(
        full_name="<script>alert(1)</script>",
        scholarship_name="Arts & Letters",
        suitability_percent=50,
        breakdown=BREAKDOWN,
    )
    assert "<script>" not in html_body
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html_body
    assert "Arts &amp; Letters" in html_body
    assert "Hello <script>alert(1)</script>," in text_body
