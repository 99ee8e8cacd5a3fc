from functools import wraps
from flask import g, jsonify

def admin_required(fn):
    """
    Usage: @admin_required
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        user = getattr(g, "user", None)
        if user is None:
            return jsonify(error="Authentication required"), 401

        if not user.is_admin:
            return jsonify(error="Admin access required"), 403

        return fn(*args, **kwargs)
    return wrapper
