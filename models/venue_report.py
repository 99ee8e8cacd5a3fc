from datetime import datetime
from models.db import db

REPORT_TYPES = ("does-not-exist", "incorrect-info", "other")


class VenueReport(db.Model):
    __tablename__ = "venue_reports"

    id = db.Column(db.Integer, primary_key=True)
    venue_id = db.Column(db.Integer, db.ForeignKey("venues.id", ondelete="CASCADE"), nullable=False, index=True)
    reported_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    report_type = db.Column(db.String(50), nullable=False)
    description = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(20), nullable=False, default="pending")

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    venue = db.relationship("Venue", back_populates="reports")
    reporter = db.relationship("User")

    __table_args__ = (
        # one report per user per venue
        db.UniqueConstraint("venue_id", "reported_by_user_id", name="uq_venue_report_once"),
    )
