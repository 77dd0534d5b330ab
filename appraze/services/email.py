"""
Transactional email sends.

Every send is fire-and-forget from the caller's point of view: failures come
back as a `SendResult` and are logged here, never raised.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import requests

from appraze.core.config import settings
from appraze.core.security import sanitize_input, sanitize_payload

logger = logging.getLogger(__name__)

BRAND_COLOR = "#4F46E5"


@dataclass
class SendResult:
    success: bool
    error: Optional[str] = None


class EmailClient:
    def __init__(self, api_key: Optional[str] = None, api_url: Optional[str] = None, sender: Optional[str] = None):
        self._api_key = api_key
        self.api_url = api_url or settings.email.api_url
        self.sender = sender or settings.email.sender

    @property
    def api_key(self) -> Optional[str]:
        return self._api_key or settings.email.api_key

    def send(self, to: str, subject: str, html: str) -> SendResult:
        api_key = self.api_key
        if not api_key:
            logger.warning("Email API key is not configured; skipping send", extra={"subject": subject})
            return SendResult(success=False, error="email API key is not configured")

        payload = {"to": to, "from": self.sender, "subject": subject, "html": html}
        try:
            response = requests.post(
                self.api_url,
                json=payload,
                headers={"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"},
                timeout=30,
            )
            response.raise_for_status()
            return SendResult(success=True)
        except requests.exceptions.RequestException as e:
            logger.error(f"Error sending email '{subject}': {e}")
            return SendResult(success=False, error=str(e))

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------
    def send_welcome_email(self, email: str, name: str) -> SendResult:
        app = settings.email.app_name
        ctx = sanitize_payload({"name": name or "User"})
        body = f"""
        <p>Hello {ctx['name']},</p>
        <p>Thank you for creating an account with {app}. We're excited to have you on board!</p>
        <p>With {app}, you can:</p>
        <ul>
          <li>Create professional performance reviews</li>
          <li>Manage employee feedback</li>
          <li>Track performance over time</li>
          <li>Download reviews in multiple formats</li>
        </ul>
        <p>If you have any questions, feel free to reply to this email.</p>"""
        return self.send(email, f"Welcome to {app}!", _layout(f"Welcome to {app}!", body))

    def send_password_reset_email(self, email: str, reset_link: str) -> SendResult:
        app = settings.email.app_name
        body = f"""
        <p>We received a request to reset your password for {app}.</p>
        <p>To reset your password, click the button below:</p>
        {_button(reset_link, "Reset Password")}
        <p>If you didn't request a password reset, please ignore this email.</p>
        <p>This password reset link will expire in 1 hour for security reasons.</p>"""
        return self.send(email, f"Reset Your {app} Password", _layout("Reset Your Password", body))

    def send_password_changed_email(self, email: str) -> SendResult:
        app = settings.email.app_name
        body = f"""
        <p>Your password for {app} has been changed successfully.</p>
        <p>If you did not make this change, please contact us immediately.</p>"""
        return self.send(
            email,
            f"Your {app} Password Has Been Changed",
            _layout("Password Changed Successfully", body),
        )

    def send_review_completion_email(self, email: str, employee_name: str, review_period: str, review_id: str) -> SendResult:
        review_link = f"{settings.email.app_url}/dashboard/reviews/{review_id}"
        ctx = sanitize_payload({"employee_name": employee_name, "review_period": review_period})
        body = f"""
        <p>The performance review for {ctx['employee_name']} ({ctx['review_period']}) has been completed successfully.</p>
        <p>You can view and download the review by clicking the button below:</p>
        {_button(review_link, "View Review")}"""
        return self.send(
            email,
            f"{employee_name}'s Performance Review is Complete",
            _layout("Performance Review Completed", body),
        )

    def send_team_invite_email(
        self,
        recipient_email: str,
        recipient_name: str,
        inviter_email: str,
        inviter_name: str,
        invite_url: str,
    ) -> SendResult:
        app = settings.email.app_name
        ctx = sanitize_payload({
            "recipient_name": recipient_name or "there",
            "inviter_name": inviter_name or inviter_email,
            "inviter_email": inviter_email,
        })
        body = f"""
        <p>Hello {ctx['recipient_name']},</p>
        <p>{ctx['inviter_name']} ({ctx['inviter_email']}) has invited you to join their team on {app}.</p>
        <p>Click the button below to accept the invitation and set up your account:</p>
        {_button(invite_url, "Accept Invitation")}
        <p>If you didn't expect this invitation, you can safely ignore this email.</p>
        <p>Best regards,<br>The {app} Team</p>"""
        return self.send(recipient_email, f"You've been invited to join {app}", _layout(f"Welcome to {app}!", body))


def _button(href: str, label: str) -> str:
    return (
        f'<div style="margin: 30px 0;">'
        f'<a href="{sanitize_input(href)}" style="background-color: {BRAND_COLOR}; color: white; padding: 12px 20px; '
        f'text-decoration: none; border-radius: 5px; display: inline-block; font-weight: bold;">{label}</a>'
        f'</div>'
    )


def _layout(heading: str, body: str) -> str:
    app = settings.email.app_name
    year = datetime.now(timezone.utc).year
    return f"""
      <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
        <img src="{settings.email.app_url}/logo.png" alt="{app}" style="max-width: 150px; margin-bottom: 20px;" />
        <h1 style="color: {BRAND_COLOR}; margin-bottom: 20px;">{heading}</h1>
        {body}
        <div style="margin-top: 30px; padding-top: 20px; border-top: 1px solid #eaeaea;">
          <p style="color: #666; font-size: 12px;">
            &copy; {year} {app}. All rights reserved.
          </p>
        </div>
      </div>
    """
