from typing import List, Tuple

from flask import current_app

_DEFAULTS = {
    "USERNAME_MIN_LEN": 3,
    "PASSWORD_MIN_LEN": 6,
    "PASSWORD_MAX_LEN": 128,
}


def _cfg(name: str) -> int:
    return int(current_app.config.get(name, _DEFAULTS[name]))


def validate_username(username) -> Tuple[bool, List[str]]:
    if not isinstance(username, str):
        return False, ["Username must be a string"]
    min_len = _cfg("USERNAME_MIN_LEN")
    errors: List[str] = []
    if len(username) < min_len:
        errors.append(f"Username must be at least {min_len} characters")
    if len(username) > 50:
        errors.append("Username must be at most 50 characters")
    return (len(errors) == 0), errors


def validate_password(pw) -> Tuple[bool, List[str]]:
    if not isinstance(pw, str):
        return False, ["Password must be a string"]

    min_len = _cfg("PASSWORD_MIN_LEN")
    max_len = _cfg("PASSWORD_MAX_LEN")
    errors: List[str] = []
    if len(pw) < min_len:
        errors.append(f"Password must be at least {min_len} characters")
    if len(pw) > max_len:
        errors.append(f"Password must be at most {max_len} characters")

    return (len(errors) == 0), errors
