import pytest

from models import db
from models.venue import Venue
from models.venue_image import VenueImage
from models.venue_report import VenueReport
from services import venues as venue_service
from services.errors import AuthorizationError, NotFoundError, ValidationError
from services.images import ImagePayload, attach_image
from services.reports import file_report
from utils.seed import seed_venues
from utils.storage import get_blob_store

from conftest import PNG_BYTES


def _png(name="photo.png"):
    return ImagePayload(name, "image/png", PNG_BYTES)


def test_create_venue_sets_owner_and_normalizes_optional_text(users, venue_data):
    venue_data.update(opening_hours="   ", prices="", has_parking=True)
    venue = venue_service.create_venue(venue_data, users["alice"])

    assert venue.owner_user_id == users["alice"]
    assert venue.opening_hours is None
    assert venue.prices is None
    assert venue.is_public is True
    assert venue.has_parking is True
    assert venue.has_lighting is False


def test_create_venue_reports_every_missing_field(users):
    with pytest.raises(ValidationError) as exc:
        venue_service.create_venue({"name": " ", "latitude": "abc", "longitude": 9.1}, users["alice"])

    assert set(exc.value.fields) == {"name", "latitude", "city", "province", "region", "sport_type"}


def test_create_venue_accepts_numeric_strings(users, venue_data):
    venue_data.update(latitude="41.9", longitude="12.49")
    venue = venue_service.create_venue(venue_data, users["alice"])
    assert venue.latitude == pytest.approx(41.9)
    assert venue.longitude == pytest.approx(12.49)


@pytest.mark.parametrize("latitude", ["nan", "NaN", "inf", "-Infinity", float("nan")])
def test_non_finite_coordinates_are_rejected(users, venue_data, latitude):
    with pytest.raises(ValidationError) as exc:
        venue_service.create_venue(dict(venue_data, latitude=latitude), users["alice"])
    assert exc.value.fields == ["latitude"]

    venue = venue_service.create_venue(venue_data, users["alice"])
    with pytest.raises(ValidationError) as exc:
        venue_service.update_venue(venue.id, dict(venue_data, longitude=latitude), users["alice"])
    assert exc.value.fields == ["longitude"]


def test_venue_input_must_be_an_object(users, venue_data):
    with pytest.raises(ValidationError):
        venue_service.create_venue(["x"], users["alice"])

    venue = venue_service.create_venue(venue_data, users["alice"])
    with pytest.raises(ValidationError):
        venue_service.update_venue(venue.id, "name", users["alice"])


def test_get_venue_includes_owner_and_empty_images(users, venue_data):
    created = venue_service.create_venue(venue_data, users["alice"])

    out = venue_service.serialize_venue(venue_service.get_venue(created.id))
    assert out["owner_username"] == "alice"
    assert out["images"] == []


def test_get_missing_venue(app):
    with pytest.raises(NotFoundError):
        venue_service.get_venue(999)


def test_filter_city_and_sport_type_against_seed(app):
    assert seed_venues() == 3

    rows = venue_service.list_venues({"city": "Milano", "sport_type": "swimming"})

    assert [v.name for v in rows] == ["Piscina Comunale Milano"]


def test_filters_substring_case_insensitive_and_exact(app):
    seed_venues()

    assert len(venue_service.list_venues({"city": "mil"})) == 2
    assert len(venue_service.list_venues({"region": "LAZ"})) == 1
    assert len(venue_service.list_venues({"sport_type": "Football"})) == 0
    assert len(venue_service.list_venues({"surface_type": "erba"})) == 0
    assert len(venue_service.list_venues({"surface_type": "erba sintetica"})) == 1
    assert len(venue_service.list_venues({})) == 3


def test_seed_is_noop_when_directory_not_empty(app):
    seed_venues()
    assert seed_venues() == 0


def test_list_is_newest_first_with_images(users, venue_data):
    first = venue_service.create_venue(dict(venue_data, name="First"), users["alice"])
    second = venue_service.create_venue(dict(venue_data, name="Second"), users["bob"])
    attach_image(first.id, users["bob"], _png())

    rows = venue_service.list_venues()

    assert [v.id for v in rows] == [second.id, first.id]
    assert len(rows[1].images) == 1
    assert rows[0].images == []


def test_update_overwrites_fields_and_bumps_timestamp(users, venue_data):
    venue = venue_service.create_venue(dict(venue_data, opening_hours="9-18"), users["alice"])
    before = venue.updated_at

    updated = venue_service.update_venue(
        venue.id,
        dict(venue_data, name="Renamed", opening_hours=" ", sport_type=""),
        users["bob"],
    )

    assert updated.name == "Renamed"
    assert updated.opening_hours is None
    # blank sport_type keeps the stored value
    assert updated.sport_type == "football"
    assert updated.owner_user_id == users["alice"]
    assert updated.updated_at >= before


def test_update_requires_name_and_coordinates(users, venue_data):
    venue = venue_service.create_venue(venue_data, users["alice"])
    with pytest.raises(ValidationError) as exc:
        venue_service.update_venue(venue.id, {"name": "", "latitude": None, "longitude": 1}, users["alice"])
    assert exc.value.fields == ["name", "latitude"]


def test_update_missing_venue(users, venue_data):
    with pytest.raises(NotFoundError):
        venue_service.update_venue(404, venue_data, users["alice"])


def test_update_owner_only_switch(app, users, venue_data):
    venue = venue_service.create_venue(venue_data, users["alice"])
    app.config["VENUE_EDIT_OWNER_ONLY"] = True

    with pytest.raises(AuthorizationError):
        venue_service.update_venue(venue.id, venue_data, users["bob"])
    venue_service.update_venue(venue.id, venue_data, users["carol"], caller_is_admin=True)


def test_owner_deletes_own_venue(users, venue_data):
    venue_id = venue_service.create_venue(venue_data, users["alice"]).id
    venue_service.delete_venue(venue_id, users["alice"])
    assert db.session.get(Venue, venue_id) is None


def test_non_owner_delete_looks_like_missing_venue(users, venue_data):
    venue = venue_service.create_venue(venue_data, users["alice"])

    with pytest.raises(AuthorizationError) as forbidden:
        venue_service.delete_venue(venue.id, users["bob"])
    with pytest.raises(AuthorizationError) as missing:
        venue_service.delete_venue(12345, users["bob"])

    assert forbidden.value.status_code == missing.value.status_code == 404
    assert forbidden.value.message == missing.value.message
    assert db.session.get(Venue, venue.id) is not None


def test_admin_delete_cascades_images_blobs_and_reports(users, venue_data):
    venue_id = venue_service.create_venue(venue_data, users["alice"]).id
    path1 = attach_image(venue_id, users["bob"], _png("a.png"))
    path2 = attach_image(venue_id, users["alice"], _png("b.png"))
    file_report(venue_id, users["bob"], "incorrect-info", "The pitch is now a parking lot")
    store = get_blob_store()
    assert store.exists(path1) and store.exists(path2)

    venue_service.delete_venue(venue_id, users["carol"], caller_is_admin=True)

    assert db.session.get(Venue, venue_id) is None
    assert VenueImage.query.filter_by(venue_id=venue_id).count() == 0
    assert VenueReport.query.filter_by(venue_id=venue_id).count() == 0
    assert not store.exists(path1)
    assert not store.exists(path2)


def test_admin_delete_missing_venue_is_not_found(users):
    with pytest.raises(NotFoundError):
        venue_service.delete_venue(777, users["carol"], caller_is_admin=True)


def test_list_user_venues(users, venue_data):
    venue_service.create_venue(venue_data, users["alice"])
    venue_service.create_venue(venue_data, users["bob"])

    rows = venue_service.list_user_venues(users["alice"])
    assert [v.owner_user_id for v in rows] == [users["alice"]]
