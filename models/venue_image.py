from datetime import datetime
from models.db import db


class VenueImage(db.Model):
    __tablename__ = "venue_images"

    id = db.Column(db.Integer, primary_key=True)
    venue_id = db.Column(db.Integer, db.ForeignKey("venues.id", ondelete="CASCADE"), nullable=False, index=True)

    # opaque blob store reference, e.g. /uploads/venue-images/venue-...png
    path = db.Column(db.String(500), nullable=False)

    uploaded_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)
    uploaded_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    is_primary = db.Column(db.Boolean, default=False, nullable=False)

    venue = db.relationship("Venue", back_populates="images")

    __table_args__ = (
        # Hard business-rule: at most one primary image per venue
        db.Index(
            "uq_venue_images_one_primary",
            "venue_id",
            unique=True,
            sqlite_where=db.text("is_primary = 1"),
            postgresql_where=db.text("is_primary"),
        ),
    )
