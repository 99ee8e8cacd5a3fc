from flask import current_app


def normalize_email(value: str) -> str:
    return (value or "").strip().lower()


def is_disposable_email(email: str) -> bool:
    if not email or "@" not in email:
        return False
    domain = normalize_email(email).rsplit("@", 1)[1]
    blocked = current_app.config.get("DISPOSABLE_EMAIL_DOMAINS") or []
    return domain in {d.lower() for d in blocked}
