"""
Email utility functions
"""
from flask_mail import Mail, Message
from flask import current_app

mail = Mail()


def _ensure_mail_configured():
    if 'mail' not in current_app.extensions:
        raise RuntimeError("Mail extension not initialized. Check app configuration.")
    if not current_app.config.get('MAIL_SERVER'):
        raise RuntimeError("MAIL_SERVER not configured. Please set MAIL_SERVER environment variable.")


def send_email(subject, recipients, body, html=None):
    """
    Send an email. Raises on SMTP failure; callers decide whether that matters.

    Args:
        subject: Email subject
        recipients: List of recipient email addresses
        body: Plain text body
        html: HTML body (optional)
    """
    _ensure_mail_configured()
    msg = Message(
        subject=subject,
        recipients=recipients,
        body=body,
        html=html
    )
    try:
        mail.send(msg)
    except Exception as e:
        current_app.logger.error(f"SMTP error sending '{subject}' to {', '.join(recipients)}: {str(e)}",
                                 exc_info=True)
        raise


def send_admin_notification(subject, body, html=None):
    """
    Send notification email to ADMIN_EMAIL.
    Silently skips if mail or the admin address is not configured.
    """
    admin_email = current_app.config.get('ADMIN_EMAIL')
    if not admin_email or not current_app.config.get('MAIL_SERVER'):
        return
    try:
        send_email(subject, [admin_email], body, html)
    except Exception as e:
        current_app.logger.error(f"Error sending admin notification: {str(e)}", exc_info=True)
        # Don't raise - admin notifications are non-critical


def send_verification_otp_email(email: str, otp: str, expiry_minutes: int = 5) -> None:
    """
    Send OTP verification email. Subject: "Verify Your Email Address".
    Uses clean HTML template; fallback plain body.
    """
    subject = "Verify Your Email Address"
    body = f"Your verification code is: {otp}. It expires in {expiry_minutes} minutes. Do not share this code."
    send_email(subject, [email], body, _otp_email_html(otp, expiry_minutes))


def send_upcoming_checkin_reminder(user, expected_display: str) -> None:
    subject = "Reminder: Check-In Time Approaching"
    body = (f"Reminder: Check-In Time Approaching. Dear {user.name}, your expected check-in time is "
            f"{expected_display}. Please check in on time.")
    html = _card_html(
        "#17a2b8",
        "Reminder: Check-In Time Approaching",
        f"""
        <p>Dear {user.name},</p>
        <p>This is a friendly reminder that your check-in time is approaching.</p>
        <p><strong>Expected Check-In Time:</strong> {expected_display}</p>
        <p>Please ensure you check in on time to avoid being marked as late or absent.</p>
        """,
    )
    send_email(subject, [user.email], body, html)


def send_late_checkin_reminder(user, expected_display: str, now_display: str, minutes_late: int) -> None:
    subject = "Check-In Reminder - You Haven't Checked In Today"
    body = (f"Check-In Reminder: Dear {user.name}, you have not checked in today. Expected time: "
            f"{expected_display}. You are {minutes_late} minutes late. "
            f"Please check in immediately or contact HR.")
    html = _card_html(
        "#dc3545",
        "Check-In Reminder",
        f"""
        <p>Dear {user.name},</p>
        <p><strong>You have not checked in today!</strong></p>
        <p><strong>Expected Check-In Time:</strong> {expected_display}</p>
        <p><strong>Current Time:</strong> {now_display}</p>
        <p><strong>You are {minutes_late} minutes late</strong></p>
        <ul>
            <li>If you are planning to work today, please check in immediately through the attendance app</li>
            <li>If you are sick or have an emergency, please contact HR immediately</li>
            <li>If you have leave approved, please ignore this message</li>
        </ul>
        """,
    )
    send_email(subject, [user.email], body, html)


def send_late_checkin_admin_alert(user, expected_display: str, now_display: str, minutes_late: int) -> None:
    subject = f"Staff Check-In Alert - {user.name} Has Not Checked In"
    body = (f"Staff Check-In Alert: {user.name} has not checked in today. "
            f"Expected: {expected_display}, {minutes_late} minutes late.")
    html = _card_html(
        "#dc3545",
        "Staff Check-In Alert",
        f"""
        <p><strong>Staff Member:</strong> {user.name}</p>
        <p><strong>Email:</strong> {user.email}</p>
        <p><strong>Expected Check-In:</strong> {expected_display}</p>
        <p><strong>Current Time:</strong> {now_display}</p>
        <p><strong>Minutes Late:</strong> {minutes_late} minutes</p>
        <p>A reminder email has been sent to the staff member.</p>
        """,
    )
    send_admin_notification(subject, body, html)


def send_absence_notice(user, day_display: str) -> None:
    subject = "Marked as Absent - No Check-In Recorded Today"
    body = (f"You have been marked as ABSENT for today ({day_display}) due to no check-in recorded "
            f"and no approved leave. Contact HR immediately if this is incorrect.")
    html = _card_html(
        "#dc3545",
        "Marked as Absent",
        f"""
        <p>Dear {user.name},</p>
        <p><strong>You have been marked as ABSENT for today ({day_display})</strong></p>
        <p><strong>Reason:</strong> No check-in recorded and no approved leave</p>
        <p>Please contact HR for any questions or corrections.</p>
        """,
    )
    send_email(subject, [user.email], body, html)


def send_absence_admin_alert(user, day_display: str) -> None:
    subject = f"Staff Marked as Absent - {user.name}"
    body = (f"Staff {user.name} has been marked as absent for {day_display} - "
            f"no check-in and no approved leave.")
    html = _card_html(
        "#dc3545",
        "Staff Marked as Absent",
        f"""
        <p><strong>Staff Member:</strong> {user.name}</p>
        <p><strong>Email:</strong> {user.email}</p>
        <p><strong>Date:</strong> {day_display}</p>
        <p>The staff member has been notified via email.</p>
        """,
    )
    send_admin_notification(subject, body, html)


def _otp_email_html(otp: str, expiry_minutes: int) -> str:
    """Clean HTML template for OTP email."""
    return f"""
    <!DOCTYPE html>
    <html>
    <head><meta charset="utf-8"><title>Verify Your Email</title></head>
    <body style="font-family: system-ui, sans-serif; max-width: 480px; margin: 0 auto; padding: 24px;">
        <h2 style="color: #1a1a2e;">Verify Your Email Address</h2>
        <p>Use the code below to verify your email:</p>
        <p style="font-size: 28px; font-weight: bold; letter-spacing: 6px; color: #16213e;">{otp}</p>
        <p style="color: #666;">This code expires in {expiry_minutes} minutes. Do not share it with anyone.</p>
        <hr style="border: none; border-top: 1px solid #eee; margin: 24px 0;">
        <p style="font-size: 12px; color: #999;">If you did not request this, you can ignore this email.</p>
    </body>
    </html>
    """


def _card_html(color: str, title: str, inner: str) -> str:
    """Bordered card layout shared by attendance emails."""
    return f"""
    <!DOCTYPE html>
    <html>
    <head><meta charset="utf-8"><title>{title}</title></head>
    <body style="font-family: Arial, sans-serif;">
        <div style="max-width: 600px; margin: 0 auto; padding: 20px; border: 2px solid {color}; border-radius: 10px;">
            <h2 style="color: {color}; text-align: center;">{title}</h2>
            {inner}
            <p>Best regards,<br>HR Team</p>
        </div>
    </body>
    </html>
    """
