from flask import Blueprint, request, jsonify, g

from security.rbac import admin_required
from services import images as image_service
from services import reports as report_service
from services import venues as venue_service
from services.errors import ValidationError
from services.images import ImagePayload
from utils.auth_context import login_required

venues_bp = Blueprint("venues", __name__, url_prefix="/venues")

FILTER_KEYS = (
    "city",
    "province",
    "region",
    "surface_type",
    "venue_type",
    "sport_type",
)


def _json_object():
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


# ---------- PUBLIC: browse venues ----------
@venues_bp.get("")
def list_venues():
    filters = {key: request.args.get(key) for key in FILTER_KEYS if request.args.get(key)}
    rows = venue_service.list_venues(filters)
    return jsonify([venue_service.serialize_venue(v) for v in rows]), 200


@venues_bp.get("/<int:venue_id>")
def get_venue(venue_id: int):
    venue = venue_service.get_venue(venue_id)
    return jsonify(venue_service.serialize_venue(venue)), 200


# ---------- USERS: add / edit / delete venues ----------
@venues_bp.post("")
@login_required
def create_venue():
    data = _json_object()
    venue = venue_service.create_venue(data, g.user.id)
    return jsonify(message="Venue added successfully", venue=venue_service.serialize_venue(venue)), 201


@venues_bp.put("/<int:venue_id>")
@login_required
def update_venue(venue_id: int):
    data = _json_object()
    venue = venue_service.update_venue(venue_id, data, g.user.id, g.user.is_admin)
    return jsonify(message="Venue updated successfully", venue=venue_service.serialize_venue(venue)), 200


@venues_bp.delete("/<int:venue_id>")
@login_required
def delete_venue(venue_id: int):
    venue_service.delete_venue(venue_id, g.user.id, g.user.is_admin)
    message = "Venue deleted (admin)" if g.user.is_admin else "Venue deleted successfully"
    return jsonify(message=message), 200


# ---------- USERS: images ----------
@venues_bp.post("/<int:venue_id>/images")
@login_required
def upload_image(venue_id: int):
    upload = request.files.get("image")
    payload = None
    if upload is not None and upload.filename:
        payload = ImagePayload(upload.filename, upload.mimetype, upload.read())

    path = image_service.attach_image(venue_id, g.user.id, payload)
    return jsonify(message="Image uploaded successfully", image_url=path), 201


@venues_bp.delete("/<int:venue_id>/images/<int:image_id>")
@login_required
def delete_image(venue_id: int, image_id: int):
    image_service.remove_image(image_id, g.user.id, g.user.is_admin, venue_id=venue_id)
    return jsonify(message="Image deleted successfully"), 200


@venues_bp.put("/<int:venue_id>/images/<int:image_id>/primary")
@login_required
def set_primary_image(venue_id: int, image_id: int):
    image_service.set_primary(venue_id, image_id, g.user.id, g.user.is_admin)
    return jsonify(message="Primary image updated successfully"), 200


# ---------- USERS: reports ----------
@venues_bp.post("/<int:venue_id>/reports")
@login_required
def report_venue(venue_id: int):
    data = _json_object()
    report = report_service.file_report(
        venue_id,
        g.user.id,
        data.get("report_type"),
        data.get("description"),
    )
    return jsonify(message="Report submitted", report=report_service.serialize_report(report)), 201


@venues_bp.get("/<int:venue_id>/reports")
@login_required
def venue_reports(venue_id: int):
    rows = report_service.list_reports_for_venue(venue_id, g.user.id, g.user.is_admin)
    return jsonify([report_service.serialize_report(r) for r in rows]), 200


# ---------- ADMIN: all reports ----------
@venues_bp.get("/reports/all")
@admin_required
def all_reports():
    rows = report_service.list_all_reports(g.user.is_admin)
    return jsonify([report_service.serialize_report(r, include_venue=True) for r in rows]), 200
