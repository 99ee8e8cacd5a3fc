from .db import db
from .user import User
from .audit_log import AuditLog
from .session import Session
from .venue import Venue
from .venue_image import VenueImage
from .venue_report import VenueReport, REPORT_TYPES
