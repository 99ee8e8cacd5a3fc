from flask import Blueprint, jsonify, g

from services import venues as venue_service
from utils.auth_context import login_required

users_bp = Blueprint("users", __name__, url_prefix="/users")


@users_bp.get("/profile")
@login_required
def profile():
    return jsonify(
        id=g.user.id,
        username=g.user.username,
        email=g.user.email,
        is_admin=g.user.is_admin,
        created_at=g.user.created_at.isoformat(),
    ), 200


@users_bp.get("/my-venues")
@login_required
def my_venues():
    rows = venue_service.list_user_venues(g.user.id)
    return jsonify([venue_service.serialize_venue(v) for v in rows]), 200
