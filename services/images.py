"""
Venue images and the primary-image rule.

A venue with images has exactly one primary. The database holds the "at most
one" half through a partial unique index; the code below keeps the "at least
one" half on attach and remove.
"""
import os
from collections import namedtuple

from flask import current_app
from sqlalchemy import exists
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import aliased

from models import db
from models.venue import Venue
from models.venue_image import VenueImage
from security.policy import can_delete_image, can_mutate_venue
from services.errors import AuthorizationError, ConflictError, NotFoundError, RejectedError
from utils.audit import log_event
from utils.storage import get_blob_store

ImagePayload = namedtuple("ImagePayload", ["filename", "content_type", "data"])

# extension -> content types it may be declared with
ALLOWED_IMAGE_TYPES = {
    "jpg": {"image/jpeg", "image/jpg"},
    "jpeg": {"image/jpeg", "image/jpg"},
    "png": {"image/png"},
    "gif": {"image/gif"},
}


def validate_payload(payload, max_bytes):
    if payload is None or not payload.data:
        raise RejectedError("No image file provided", fields=["image"])

    ext = os.path.splitext(payload.filename or "")[1].lower().lstrip(".")
    content_type = (payload.content_type or "").split(";")[0].strip().lower()
    if content_type not in ALLOWED_IMAGE_TYPES.get(ext, set()):
        raise RejectedError(
            f"Only jpg, jpeg, png or gif images are allowed. Received: {content_type or 'unknown'}",
            fields=["image"],
        )

    if len(payload.data) > max_bytes:
        raise RejectedError(f"Image exceeds the {max_bytes // (1024 * 1024)} MB limit", fields=["image"])

    return content_type


def attach_image(venue_id, uploader_id, payload):
    max_bytes = current_app.config.get("MAX_IMAGE_BYTES", 5 * 1024 * 1024)
    content_type = validate_payload(payload, max_bytes)

    venue = db.session.get(Venue, venue_id)
    if venue is None:
        raise NotFoundError("Venue not found")

    store = get_blob_store()
    path = store.store(payload.data, content_type)

    is_first = db.session.query(VenueImage.id).filter_by(venue_id=venue.id).first() is None
    image = VenueImage(venue_id=venue.id, path=path, uploaded_by_user_id=uploader_id, is_primary=is_first)
    db.session.add(image)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        if not is_first:
            store.delete(path)
            raise
        # another upload became the first image concurrently
        image = VenueImage(venue_id=venue_id, path=path, uploaded_by_user_id=uploader_id, is_primary=False)
        db.session.add(image)
        db.session.commit()

    log_event(
        "IMAGE_ATTACH",
        user_id=uploader_id,
        entity="venue_image",
        entity_id=image.id,
        metadata={"venue_id": venue_id, "primary": image.is_primary},
    )
    return image.path


def _promote_oldest(venue_id):
    """Make the earliest-uploaded image primary unless one already is.

    The update is conditional so two concurrent removals of the primary
    cannot both promote.
    """
    candidate = (
        VenueImage.query
        .filter_by(venue_id=venue_id)
        .order_by(VenueImage.uploaded_at.asc(), VenueImage.id.asc())
        .first()
    )
    if candidate is None:
        return None

    other = aliased(VenueImage)
    primary_exists = exists().where(other.venue_id == venue_id, other.is_primary.is_(True))
    updated = (
        VenueImage.query
        .filter(VenueImage.id == candidate.id, ~primary_exists)
        .update({VenueImage.is_primary: True}, synchronize_session=False)
    )
    return candidate.id if updated else None


def remove_image(image_id, caller_id, caller_is_admin=False, venue_id=None):
    image = db.session.get(VenueImage, image_id)
    if image is None or (venue_id is not None and image.venue_id != venue_id):
        raise NotFoundError("Image not found")

    admin_override = current_app.config.get("IMAGE_DELETE_ADMIN_OVERRIDE", False)
    if not can_delete_image(caller_id, caller_is_admin, image.uploaded_by_user_id, admin_override=admin_override):
        raise AuthorizationError("You can only delete images you uploaded")

    owning_venue_id = image.venue_id
    path = image.path
    was_primary = image.is_primary

    db.session.delete(image)
    db.session.flush()

    promoted = _promote_oldest(owning_venue_id) if was_primary else None
    db.session.commit()

    store = get_blob_store()
    try:
        if store.exists(path):
            store.delete(path)
    except OSError:
        current_app.logger.exception("Could not delete image blob %s", path)

    log_event(
        "IMAGE_REMOVE",
        user_id=caller_id,
        entity="venue_image",
        entity_id=image_id,
        metadata={"venue_id": owning_venue_id, "promoted": promoted},
    )
    return promoted


def set_primary(venue_id, image_id, caller_id, caller_is_admin=False):
    image = VenueImage.query.filter_by(id=image_id, venue_id=venue_id).first()
    if image is None:
        raise NotFoundError("Image not found")

    owner_only = current_app.config.get("VENUE_EDIT_OWNER_ONLY", False)
    if not can_mutate_venue(caller_id, caller_is_admin, image.venue.owner_user_id, owner_only=owner_only):
        raise AuthorizationError("You can only edit venues you added")

    VenueImage.query.filter(
        VenueImage.venue_id == venue_id,
        VenueImage.is_primary.is_(True),
    ).update({VenueImage.is_primary: False}, synchronize_session=False)
    VenueImage.query.filter(VenueImage.id == image_id).update(
        {VenueImage.is_primary: True}, synchronize_session=False
    )
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Primary image was changed concurrently, try again")

    log_event("IMAGE_SET_PRIMARY", user_id=caller_id, entity="venue_image", entity_id=image_id,
              metadata={"venue_id": venue_id})


def serialize_image(image):
    return {
        "id": image.id,
        "venue_id": image.venue_id,
        "path": image.path,
        "uploaded_by_user_id": image.uploaded_by_user_id,
        "uploaded_at": image.uploaded_at.isoformat() if image.uploaded_at else None,
        "is_primary": image.is_primary,
    }
