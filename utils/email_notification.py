"""
Email notification for scored applications.
Sent over standard SMTP; sending is fire-and-forget from the request path.
"""

import html
import logging
import os
import smtplib
import threading
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

CRITERION_LABELS = {
    "academic_level": "Academic level",
    "gpa": "GPA",
    "field_of_study": "Field of study",
    "country": "Country",
    "documents": "Documents",
    "motivation": "Motivation statement",
    "extracurricular": "Extracurricular activities",
}


def get_application_url(application_id: Optional[int] = None) -> str:
    base_url = os.environ.get("APP_URL", "http://localhost:5000")
    url = f"{base_url}/applications"
    if application_id is not None:
        url += f"/{application_id}"
    return url


def build_suitability_email(
    full_name: str,
    scholarship_name: str,
    suitability_percent: int,
    breakdown: List[Dict],
    application_url: Optional[str] = None,
) -> tuple:
    """Return (subject, html_body, text_body)."""
    subject = f"Application received: {scholarship_name}"
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    safe_name = html.escape(full_name or "")
    safe_scholarship = html.escape(scholarship_name or "")
    safe_url = html.escape(application_url, quote=True) if application_url else None

    rows_html = "".join(
        f"<tr><td>{CRITERION_LABELS.get(item['key'], item['key'])}</td><td>{item['points']}</td></tr>"
        for item in breakdown
    )
    rows_text = "\n".join(
        f"  {CRITERION_LABELS.get(item['key'], item['key'])}: {item['points']}"
        for item in breakdown
    )

    html_body = f"""
    <html>
    <head>
        <style>
            body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; }}
            .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
            .header {{ background-color: #4CAF50; color: white; padding: 20px; text-align: center; }}
            .content {{ background-color: #f9f9f9; padding: 20px; }}
            .score {{ font-size: 28px; font-weight: bold; }}
            .button {{ display: inline-block; padding: 12px 24px; background-color: #4CAF50; color: #ffffff !important; text-decoration: none; border-radius: 4px; margin: 10px 0; }}
            .footer {{ text-align: center; padding: 20px; color: #666; font-size: 12px; }}
        </style>
    </head>
    <body>
        <div class="container">
            <div class="header"><h2>Application received</h2></div>
            <div class="content">
                <p>Hello {safe_name},</p>
                <p>Your application for <strong>{safe_scholarship}</strong> has been received.</p>
                <p>Estimated suitability: <span class="score">{suitability_percent}%</span></p>
                <table>{rows_html}</table>
                <p>This estimate is advisory and is not an award decision.</p>
                {f'<p><a href="{safe_url}" class="button">View application</a></p>' if safe_url else ''}
            </div>
            <div class="footer">
                <p>Submitted {timestamp}<br>
                This is an automated notification. Please do not reply to this email.</p>
            </div>
        </div>
    </body>
    </html>
    """

    text_body = (
        f"Hello {full_name},\n\n"
        f"Your application for {scholarship_name} has been received.\n"
        f"Estimated suitability: {suitability_percent}%\n\n"
        f"{rows_text}\n\n"
        "This estimate is advisory and is not an award decision.\n"
        + (f"\nView application: {application_url}\n" if application_url else "")
        + f"\nSubmitted {timestamp}\n"
    )
    return subject, html_body, text_body


def send_smtp_email(to_email: str, subject: str, html_body: str, text_body: str) -> bool:
    """
    Send email over SMTP with STARTTLS. Requires EMAIL and SMTP_PASSWORD;
    SMTP_HOST / SMTP_PORT default to Gmail.

    Returns:
        True if email sent successfully, False otherwise
    """
    smtp_user = (os.environ.get("EMAIL") or "").strip()
    smtp_password = (os.environ.get("SMTP_PASSWORD") or "").strip().replace(" ", "")
    if not smtp_user or not smtp_password:
        logger.warning("Email not configured. Set EMAIL and SMTP_PASSWORD.")
        return False

    smtp_host = os.environ.get("SMTP_HOST", "smtp.gmail.com")
    try:
        smtp_port = int(os.environ.get("SMTP_PORT", "587"))
    except ValueError:
        smtp_port = 587

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = smtp_user
    msg["To"] = to_email
    msg.attach(MIMEText(text_body, "plain"))
    msg.attach(MIMEText(html_body, "html"))

    try:
        server = smtplib.SMTP(smtp_host, smtp_port, timeout=30)
        try:
            server.starttls()
            server.login(smtp_user, smtp_password)
            server.send_message(msg)
        finally:
            server.quit()
    except (smtplib.SMTPException, OSError) as e:
        logger.warning(f"❌ Error sending SMTP email to {to_email}: {e}")
        return False

    logger.info(f"✅ Email notification sent to {to_email}")
    return True


def send_suitability_email(
    user_email: str,
    full_name: str,
    scholarship_name: str,
    suitability_percent: int,
    breakdown: List[Dict],
    application_id: Optional[int] = None,
) -> bool:
    """Send the applicant their suitability estimate. Never raises."""
    try:
        subject, html_body, text_body = build_suitability_email(
            full_name=full_name,
            scholarship_name=scholarship_name,
            suitability_percent=suitability_percent,
            breakdown=breakdown,
            application_url=get_application_url(application_id),
        )
        return send_smtp_email(user_email, subject, html_body, text_body)
    except Exception as e:
        logger.warning(f"Failed to send suitability email to {user_email}: {e}", exc_info=True)
        return False


def notify_suitability_async(**kwargs) -> threading.Thread:
    """Fire-and-forget: send the suitability email on a daemon thread."""
    thread = threading.Thread(
        target=send_suitability_email,
        kwargs=kwargs,
        name="suitability-email",
        daemon=True,
    )
    thread.start()
    return thread
