from models import db
from models.venue import Venue

SAMPLE_VENUES = [
    {
        "name": "Campo Comunale San Siro",
        "description": "Campo da calcio comunale con erba naturale",
        "latitude": 45.4642, "longitude": 9.1900,
        "city": "Milano", "province": "MI", "region": "Lombardia",
        "sport_type": "football", "surface_type": "erba naturale", "venue_type": "11vs11",
    },
    {
        "name": "Centro Sportivo Comunale",
        "description": "Centro sportivo con campo da calcio",
        "latitude": 41.9028, "longitude": 12.4964,
        "city": "Roma", "province": "RM", "region": "Lazio",
        "sport_type": "football", "surface_type": "erba sintetica", "venue_type": "11vs11",
    },
    {
        "name": "Piscina Comunale Milano",
        "description": "Piscina olimpionica comunale",
        "latitude": 45.4642, "longitude": 9.1900,
        "city": "Milano", "province": "MI", "region": "Lombardia",
        "sport_type": "swimming", "surface_type": "acqua", "venue_type": "olimpionica",
    },
]

def seed_venues():
    """Insert the sample venues when the directory is empty. Returns rows added."""
    if Venue.query.first() is not None:
        return 0
    for row in SAMPLE_VENUES:
        db.session.add(Venue(
            is_public=True,
            has_lighting=True,
            has_changing_rooms=True,
            has_parking=True,
            **row,
        ))
    db.session.commit()
    return len(SAMPLE_VENUES)
