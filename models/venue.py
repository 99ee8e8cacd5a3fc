from datetime import datetime
from models.db import db


class Venue(db.Model):
    __tablename__ = "venues"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)

    latitude = db.Column(db.Float, nullable=False)
    longitude = db.Column(db.Float, nullable=False)

    address = db.Column(db.Text, nullable=True)
    city = db.Column(db.String(100), nullable=True, index=True)
    province = db.Column(db.String(100), nullable=True)
    region = db.Column(db.String(100), nullable=True)

    # football, swimming, basketball, tennis, ... or "others"; not constrained
    sport_type = db.Column(db.String(50), nullable=False, index=True)
    surface_type = db.Column(db.String(50), nullable=True)
    venue_type = db.Column(db.String(50), nullable=True)

    is_public = db.Column(db.Boolean, default=True, nullable=False)
    has_lighting = db.Column(db.Boolean, default=False, nullable=False)
    has_changing_rooms = db.Column(db.Boolean, default=False, nullable=False)
    has_parking = db.Column(db.Boolean, default=False, nullable=False)

    opening_hours = db.Column(db.Text, nullable=True)
    prices = db.Column(db.Text, nullable=True)

    # seed data may have no owner
    owner_user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    owner = db.relationship("User", back_populates="venues")
    images = db.relationship(
        "VenueImage",
        back_populates="venue",
        cascade="all, delete-orphan",
        order_by="[VenueImage.uploaded_at, VenueImage.id]",
        lazy=True,
    )
    reports = db.relationship(
        "VenueReport",
        back_populates="venue",
        cascade="all, delete-orphan",
        lazy=True,
    )

    @property
    def owner_username(self):
        return self.owner.username if self.owner else None
