import pytest

from models import db
from models.venue_image import VenueImage
from services import venues as venue_service
from services.errors import AuthorizationError, NotFoundError, RejectedError
from services.images import ImagePayload, _promote_oldest, attach_image, remove_image, set_primary
from utils.storage import get_blob_store

from conftest import JPEG_BYTES, PNG_BYTES


@pytest.fixture
def venue_id(users, venue_data):
    return venue_service.create_venue(venue_data, users["alice"]).id


def _png(name="photo.png"):
    return ImagePayload(name, "image/png", PNG_BYTES)


def _images(venue_id):
    return (
        VenueImage.query
        .filter_by(venue_id=venue_id)
        .order_by(VenueImage.uploaded_at.asc(), VenueImage.id.asc())
        .all()
    )


def _primary_ids(venue_id):
    return [img.id for img in _images(venue_id) if img.is_primary]


def _assert_primary_invariant(venue_id):
    images = _images(venue_id)
    expected = 1 if images else 0
    assert len([img for img in images if img.is_primary]) == expected


def test_first_image_becomes_primary(users, venue_id):
    path1 = attach_image(venue_id, users["bob"], _png("one.png"))
    path2 = attach_image(venue_id, users["bob"], ImagePayload("two.JPG", "image/jpeg", JPEG_BYTES))

    first, second = _images(venue_id)
    assert (first.path, first.is_primary) == (path1, True)
    assert (second.path, second.is_primary) == (path2, False)
    assert path2.endswith(".jpg")
    assert get_blob_store().exists(path1)


@pytest.mark.parametrize(
    "payload",
    [
        ImagePayload("photo.png", "image/jpeg", PNG_BYTES),
        ImagePayload("photo.bmp", "image/bmp", PNG_BYTES),
        ImagePayload("photo.png", "application/octet-stream", PNG_BYTES),
        ImagePayload("photo", "image/png", PNG_BYTES),
        ImagePayload("photo.png", "image/png", b""),
        None,
    ],
)
def test_attach_rejects_bad_payloads(users, venue_id, payload):
    with pytest.raises(RejectedError):
        attach_image(venue_id, users["bob"], payload)
    assert _images(venue_id) == []


def test_attach_rejects_oversized_image(users, venue_id):
    too_big = ImagePayload("big.gif", "image/gif", b"G" * (5 * 1024 * 1024 + 1))
    with pytest.raises(RejectedError):
        attach_image(venue_id, users["bob"], too_big)


def test_attach_accepts_exactly_five_mib(users, venue_id):
    attach_image(venue_id, users["bob"], ImagePayload("big.gif", "image/gif", b"G" * (5 * 1024 * 1024)))
    assert len(_images(venue_id)) == 1


def test_attach_to_missing_venue(users):
    with pytest.raises(NotFoundError):
        attach_image(4040, users["bob"], _png())


def test_removing_primary_promotes_earliest_remaining(users, venue_id):
    """Venue owned by alice; bob adds I1 (primary) and I2; deleting I1 promotes I2."""
    path1 = attach_image(venue_id, users["bob"], _png("i1.png"))
    attach_image(venue_id, users["bob"], _png("i2.png"))
    attach_image(venue_id, users["bob"], _png("i3.png"))
    i1, i2, i3 = [img.id for img in _images(venue_id)]

    promoted = remove_image(i1, users["bob"])

    assert promoted == i2
    assert _primary_ids(venue_id) == [i2]
    assert not get_blob_store().exists(path1)
    _assert_primary_invariant(venue_id)


def test_removing_non_primary_keeps_primary(users, venue_id):
    attach_image(venue_id, users["bob"], _png())
    attach_image(venue_id, users["bob"], _png())
    i1, i2 = [img.id for img in _images(venue_id)]

    assert remove_image(i2, users["bob"]) is None
    assert _primary_ids(venue_id) == [i1]


def test_removing_sole_image_leaves_no_primary(users, venue_id):
    attach_image(venue_id, users["bob"], _png())
    (only,) = _images(venue_id)

    remove_image(only.id, users["bob"])

    assert _images(venue_id) == []
    _assert_primary_invariant(venue_id)


def test_only_uploader_may_remove(users, venue_id):
    attach_image(venue_id, users["bob"], _png())
    image_id = _images(venue_id)[0].id

    with pytest.raises(AuthorizationError):
        remove_image(image_id, users["alice"])
    # admins get no override unless it is switched on
    with pytest.raises(AuthorizationError):
        remove_image(image_id, users["carol"], caller_is_admin=True)
    assert db.session.get(VenueImage, image_id) is not None


def test_admin_override_switch(app, users, venue_id):
    attach_image(venue_id, users["bob"], _png())
    image_id = _images(venue_id)[0].id
    app.config["IMAGE_DELETE_ADMIN_OVERRIDE"] = True

    remove_image(image_id, users["carol"], caller_is_admin=True)
    assert db.session.get(VenueImage, image_id) is None


def test_remove_missing_or_mismatched_image(users, venue_id, venue_data):
    other_venue = venue_service.create_venue(venue_data, users["bob"]).id
    attach_image(other_venue, users["bob"], _png())
    image_id = _images(other_venue)[0].id

    with pytest.raises(NotFoundError):
        remove_image(999, users["bob"])
    with pytest.raises(NotFoundError):
        remove_image(image_id, users["bob"], venue_id=venue_id)


def test_promotion_is_conditional(users, venue_id):
    attach_image(venue_id, users["bob"], _png())
    attach_image(venue_id, users["bob"], _png())

    # a primary already exists, so a late promotion must not add another
    assert _promote_oldest(venue_id) is None
    db.session.commit()
    _assert_primary_invariant(venue_id)


def test_set_primary_is_idempotent(users, venue_id):
    for _ in range(3):
        attach_image(venue_id, users["bob"], _png())
    i1, i2, i3 = [img.id for img in _images(venue_id)]

    set_primary(venue_id, i3, users["alice"])
    once = [(img.id, img.is_primary) for img in _images(venue_id)]
    set_primary(venue_id, i3, users["alice"])
    twice = [(img.id, img.is_primary) for img in _images(venue_id)]

    assert once == twice
    assert _primary_ids(venue_id) == [i3]


def test_set_primary_requires_image_of_that_venue(users, venue_id, venue_data):
    other_venue = venue_service.create_venue(venue_data, users["bob"]).id
    attach_image(other_venue, users["bob"], _png())
    foreign_image = _images(other_venue)[0].id

    with pytest.raises(NotFoundError):
        set_primary(venue_id, foreign_image, users["alice"])
    with pytest.raises(NotFoundError):
        set_primary(venue_id, 31337, users["alice"])
    assert _primary_ids(other_venue) == [foreign_image]
