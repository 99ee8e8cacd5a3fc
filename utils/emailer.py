import smtplib
import threading
from datetime import datetime
from email.message import EmailMessage

from flask import current_app

REPORT_TYPE_LABELS = {
    "does-not-exist": "Venue does not exist",
    "incorrect-info": "Incorrect information",
    "other": "Other",
}


def send_email(to_email: str, subject: str, body: str):
    host = current_app.config.get("SMTP_HOST")
    port = current_app.config.get("SMTP_PORT", 587)
    username = current_app.config.get("SMTP_USERNAME")
    password = current_app.config.get("SMTP_PASSWORD")
    from_email = current_app.config.get("SMTP_FROM_EMAIL") or username
    use_tls = current_app.config.get("SMTP_USE_TLS", True)
    timeout = current_app.config.get("SMTP_TIMEOUT_SECONDS", 10)

    if not host or not from_email or not to_email:
        return False, "Email not configured"

    msg = EmailMessage()
    msg["From"] = from_email
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.set_content(body)

    try:
        with smtplib.SMTP(host, port, timeout=timeout) as server:
            if use_tls:
                server.starttls()
            if username and password:
                server.login(username, password)
            server.send_message(msg)
        return True, None
    except (smtplib.SMTPException, OSError) as exc:
        return False, str(exc)


def build_report_email(details: dict):
    subject = f"New venue report: {details['venue_name']}"
    address = ", ".join(
        part for part in (details.get("address"), details.get("city"), details.get("province")) if part
    )
    body = (
        "A venue has been reported.\n\n"
        f"Venue: {details['venue_name']} (#{details['venue_id']})\n"
        f"Address: {address or '-'}\n"
        f"Report type: {REPORT_TYPE_LABELS.get(details['report_type'], details['report_type'])}\n"
        f"Description: {details.get('description') or '-'}\n"
        f"Reported by: {details['reporter_username']}\n"
        f"Date: {details['reported_at']}\n"
    )
    return subject, body


def _deliver_report(details: dict):
    try:
        subject, body = build_report_email(details)
        ok, error = send_email(current_app.config.get("REPORT_NOTIFY_EMAIL"), subject, body)
    except Exception:
        current_app.logger.exception("Report notification failed for report %s", details.get("report_id"))
        return
    if ok:
        current_app.logger.info("Report notification sent for venue %s", details["venue_id"])
    else:
        current_app.logger.warning("Report notification not sent for venue %s: %s", details["venue_id"], error)


def _deliver_in_context(app, details: dict):
    with app.app_context():
        _deliver_report(details)


def notify_report(report, venue, reporter):
    """Fire-and-forget notification for a newly filed report.

    Values are copied out of the ORM objects first so the background thread
    never touches the request's database session.
    """
    details = {
        "report_id": report.id,
        "report_type": report.report_type,
        "description": report.description,
        "reported_at": (report.created_at or datetime.utcnow()).strftime("%d/%m/%Y %H:%M"),
        "venue_id": venue.id,
        "venue_name": venue.name,
        "address": venue.address,
        "city": venue.city,
        "province": venue.province,
        "reporter_username": reporter.username if reporter else "Anonymous user",
    }

    if not current_app.config.get("NOTIFY_ASYNC", True):
        _deliver_report(details)
        return

    app = current_app._get_current_object()
    worker = threading.Thread(target=_deliver_in_context, args=(app, details), daemon=True)
    worker.start()
