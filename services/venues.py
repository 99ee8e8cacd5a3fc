"""
Venue repository: listing/filtering, create, update and cascading delete.

Functions take the caller's id (and admin flag where it matters) rather than
reading ``flask.g`` so they can be driven from routes, the CLI and tests
alike.
"""
import math
from datetime import datetime

from flask import current_app
from sqlalchemy.orm import joinedload, selectinload

from models import db
from models.venue import Venue
from security.policy import can_delete_venue, can_mutate_venue
from services.errors import AuthorizationError, NotFoundError, ValidationError
from services.images import serialize_image
from utils.audit import log_event
from utils.storage import get_blob_store

SUBSTRING_FILTERS = ("city", "province", "region")
EXACT_FILTERS = ("surface_type", "venue_type", "sport_type")

TEXT_FIELDS = (
    "name",
    "description",
    "address",
    "city",
    "province",
    "region",
    "sport_type",
    "surface_type",
    "venue_type",
)
FLAG_DEFAULTS = {
    "is_public": True,
    "has_lighting": False,
    "has_changing_rooms": False,
    "has_parking": False,
}

CREATE_REQUIRED = ("name", "city", "province", "region", "sport_type")
UPDATE_REQUIRED = ("name",)


def _clean_text(value):
    if value is None:
        return None
    if not isinstance(value, str):
        value = str(value)
    value = value.strip()
    return value or None


def _as_float(value):
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    # nan and inf parse but are not coordinates
    return result if math.isfinite(result) else None


def _as_bool(value, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes", "on"):
            return True
        if lowered in ("false", "0", "no", "off"):
            return False
    return default


def normalize_optional_text(value):
    """Empty or whitespace-only opening hours / prices are stored as unset."""
    if isinstance(value, str) and value.strip() == "":
        return None
    return value


def _parse_venue_input(data, required):
    data = {} if data is None else data
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    fields = {name: _clean_text(data.get(name)) for name in TEXT_FIELDS}
    errors = [name for name in required if not fields.get(name)]

    latitude = _as_float(data.get("latitude"))
    longitude = _as_float(data.get("longitude"))
    if latitude is None:
        errors.append("latitude")
    if longitude is None:
        errors.append("longitude")

    if errors:
        raise ValidationError("Missing or invalid fields: " + ", ".join(errors), fields=errors)

    fields["latitude"] = latitude
    fields["longitude"] = longitude
    for name, default in FLAG_DEFAULTS.items():
        fields[name] = _as_bool(data.get(name), default)
    fields["opening_hours"] = normalize_optional_text(data.get("opening_hours"))
    fields["prices"] = normalize_optional_text(data.get("prices"))
    return fields


def _with_details(query):
    return query.options(joinedload(Venue.owner), selectinload(Venue.images))


def list_venues(filters=None):
    filters = filters or {}
    q = _with_details(Venue.query)

    for name in SUBSTRING_FILTERS:
        value = (filters.get(name) or "").strip()
        if value:
            q = q.filter(getattr(Venue, name).icontains(value, autoescape=True))

    for name in EXACT_FILTERS:
        value = (filters.get(name) or "").strip()
        if value:
            q = q.filter(getattr(Venue, name) == value)

    return q.order_by(Venue.created_at.desc(), Venue.id.desc()).all()


def list_user_venues(user_id):
    return (
        _with_details(Venue.query)
        .filter(Venue.owner_user_id == user_id)
        .order_by(Venue.created_at.desc(), Venue.id.desc())
        .all()
    )


def get_venue(venue_id):
    venue = _with_details(Venue.query).filter(Venue.id == venue_id).first()
    if venue is None:
        raise NotFoundError("Venue not found")
    return venue


def create_venue(data, caller_id):
    fields = _parse_venue_input(data, CREATE_REQUIRED)

    venue = Venue(owner_user_id=caller_id, **fields)
    db.session.add(venue)
    db.session.commit()

    log_event("VENUE_CREATE", user_id=caller_id, entity="venue", entity_id=venue.id)
    return venue


def update_venue(venue_id, data, caller_id, caller_is_admin=False):
    venue = db.session.get(Venue, venue_id)
    if venue is None:
        raise NotFoundError("Venue not found")

    owner_only = current_app.config.get("VENUE_EDIT_OWNER_ONLY", False)
    if not can_mutate_venue(caller_id, caller_is_admin, venue.owner_user_id, owner_only=owner_only):
        raise AuthorizationError("You can only edit venues you added")

    fields = _parse_venue_input(data, UPDATE_REQUIRED)
    # sport_type is mandatory on the record; a blank value keeps the current one
    if not fields["sport_type"]:
        fields["sport_type"] = venue.sport_type

    for name, value in fields.items():
        setattr(venue, name, value)
    venue.updated_at = datetime.utcnow()
    db.session.commit()

    log_event("VENUE_UPDATE", user_id=caller_id, entity="venue", entity_id=venue.id)
    return venue


def delete_venue(venue_id, caller_id, caller_is_admin=False):
    """Delete a venue with its images (rows and blobs) and reports.

    Non-admin callers get the same error whether the venue is missing or
    owned by someone else, so existence is not observable.
    """
    venue = db.session.get(Venue, venue_id)
    if caller_is_admin:
        if venue is None:
            raise NotFoundError("Venue not found")
    elif venue is None or not can_delete_venue(caller_id, caller_is_admin, venue.owner_user_id):
        log_event("VENUE_DELETE_DENIED", user_id=caller_id, entity="venue", entity_id=venue_id)
        raise AuthorizationError("Venue not found or access denied", status_code=404)

    blob_paths = [img.path for img in venue.images]
    report_count = len(venue.reports)

    # images and reports go with the venue (relationship cascade)
    db.session.delete(venue)
    db.session.commit()

    _cleanup_blobs(blob_paths)

    log_event(
        "VENUE_DELETE",
        user_id=caller_id,
        entity="venue",
        entity_id=venue_id,
        metadata={"admin": bool(caller_is_admin), "images": len(blob_paths), "reports": report_count},
    )


def _cleanup_blobs(paths):
    store = get_blob_store()
    for path in paths:
        try:
            if store.exists(path):
                store.delete(path)
        except OSError:
            current_app.logger.exception("Could not delete image blob %s", path)


def _iso(value):
    return value.isoformat() if value else None


def serialize_venue(venue, include_images=True):
    out = {
        "id": venue.id,
        "name": venue.name,
        "description": venue.description,
        "latitude": venue.latitude,
        "longitude": venue.longitude,
        "address": venue.address,
        "city": venue.city,
        "province": venue.province,
        "region": venue.region,
        "sport_type": venue.sport_type,
        "surface_type": venue.surface_type,
        "venue_type": venue.venue_type,
        "is_public": venue.is_public,
        "has_lighting": venue.has_lighting,
        "has_changing_rooms": venue.has_changing_rooms,
        "has_parking": venue.has_parking,
        "opening_hours": venue.opening_hours,
        "prices": venue.prices,
        "owner_user_id": venue.owner_user_id,
        "owner_username": venue.owner_username,
        "created_at": _iso(venue.created_at),
        "updated_at": _iso(venue.updated_at),
    }
    if include_images:
        out["images"] = [serialize_image(img) for img in venue.images]
    return out
