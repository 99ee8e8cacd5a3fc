from flask import current_app
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload

from models import db
from models.user import User
from models.venue import Venue
from models.venue_report import REPORT_TYPES, VenueReport
from security.policy import can_list_all_reports, can_view_reports
from services.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from utils.audit import log_event
from utils.emailer import notify_report

DESCRIPTION_MIN_LEN = 10
DESCRIPTION_MAX_LEN = 500


def _validate(report_type, description):
    errors = []
    if report_type not in REPORT_TYPES:
        errors.append("report_type")

    if description is not None and not isinstance(description, str):
        errors.append("description")
        description = None
    elif description is not None:
        # blank counts as absent; length is checked on the text as sent
        if not description.strip():
            description = None
        elif not (DESCRIPTION_MIN_LEN <= len(description) <= DESCRIPTION_MAX_LEN):
            errors.append("description")

    if errors:
        raise ValidationError(
            f"Invalid report: report_type must be one of {', '.join(REPORT_TYPES)}; "
            f"description must be {DESCRIPTION_MIN_LEN}-{DESCRIPTION_MAX_LEN} characters",
            fields=errors,
        )
    return description


def file_report(venue_id, reporter_id, report_type, description=None):
    description = _validate(report_type, description)

    venue = db.session.get(Venue, venue_id)
    if venue is None:
        raise NotFoundError("Venue not found")

    already = VenueReport.query.filter_by(venue_id=venue_id, reported_by_user_id=reporter_id).first()
    if already is not None:
        raise ConflictError("You have already reported this venue")

    report = VenueReport(
        venue_id=venue_id,
        reported_by_user_id=reporter_id,
        report_type=report_type,
        description=description,
        status="pending",
    )
    db.session.add(report)
    try:
        db.session.commit()
    except IntegrityError:
        # Unique constraint uq_venue_report_once triggers here
        db.session.rollback()
        raise ConflictError("You have already reported this venue")

    log_event(
        "VENUE_REPORT_CREATE",
        user_id=reporter_id,
        entity="venue_report",
        entity_id=report.id,
        metadata={"venue_id": venue_id, "report_type": report_type},
    )

    reporter = db.session.get(User, reporter_id)
    try:
        notify_report(report, venue, reporter)
    except Exception:
        current_app.logger.exception("Could not dispatch notification for report %s", report.id)

    return report


def list_reports_for_venue(venue_id, caller_id, caller_is_admin=False):
    venue = db.session.get(Venue, venue_id)
    if venue is None:
        raise NotFoundError("Venue not found")

    if not can_view_reports(caller_id, caller_is_admin, venue.owner_user_id):
        raise AuthorizationError("Access denied")

    return (
        VenueReport.query
        .options(joinedload(VenueReport.reporter))
        .filter(VenueReport.venue_id == venue_id)
        .order_by(VenueReport.created_at.desc(), VenueReport.id.desc())
        .all()
    )


def list_all_reports(caller_is_admin):
    if not can_list_all_reports(caller_is_admin):
        raise AuthorizationError("Admin access required")

    return (
        VenueReport.query
        .options(joinedload(VenueReport.reporter), joinedload(VenueReport.venue))
        .order_by(VenueReport.created_at.desc(), VenueReport.id.desc())
        .all()
    )


def serialize_report(report, include_venue=False):
    out = {
        "id": report.id,
        "venue_id": report.venue_id,
        "reported_by_user_id": report.reported_by_user_id,
        "reporter_username": report.reporter.username if report.reporter else None,
        "report_type": report.report_type,
        "description": report.description,
        "status": report.status,
        "created_at": report.created_at.isoformat() if report.created_at else None,
        "updated_at": report.updated_at.isoformat() if report.updated_at else None,
    }
    if include_venue:
        venue = report.venue
        out["venue_name"] = venue.name if venue else None
        out["city"] = venue.city if venue else None
        out["province"] = venue.province if venue else None
    return out
