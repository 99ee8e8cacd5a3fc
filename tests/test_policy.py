from security.policy import (
    can_delete_image,
    can_delete_venue,
    can_list_all_reports,
    can_mutate_venue,
    can_view_reports,
)


def test_any_authenticated_user_may_edit_by_default():
    assert can_mutate_venue(2, False, owner_user_id=1)
    assert can_mutate_venue(2, False, owner_user_id=None)
    assert not can_mutate_venue(None, False, owner_user_id=1)


def test_owner_only_edit_switch():
    assert not can_mutate_venue(2, False, owner_user_id=1, owner_only=True)
    assert can_mutate_venue(1, False, owner_user_id=1, owner_only=True)
    assert can_mutate_venue(3, True, owner_user_id=1, owner_only=True)


def test_delete_venue_owner_or_admin():
    assert can_delete_venue(1, False, owner_user_id=1)
    assert can_delete_venue(3, True, owner_user_id=1)
    assert not can_delete_venue(2, False, owner_user_id=1)
    # seed venues have no owner: only admins may remove them
    assert not can_delete_venue(2, False, owner_user_id=None)
    assert can_delete_venue(3, True, owner_user_id=None)


def test_view_reports_owner_or_admin():
    assert can_view_reports(1, False, owner_user_id=1)
    assert can_view_reports(3, True, owner_user_id=1)
    assert not can_view_reports(2, False, owner_user_id=1)
    assert not can_view_reports(None, True, owner_user_id=1)


def test_list_all_reports_admin_only():
    assert can_list_all_reports(True)
    assert not can_list_all_reports(False)


def test_image_delete_uploader_only_unless_override():
    assert can_delete_image(2, False, uploaded_by_user_id=2)
    assert not can_delete_image(3, True, uploaded_by_user_id=2)
    assert can_delete_image(3, True, uploaded_by_user_id=2, admin_override=True)
    assert not can_delete_image(1, False, uploaded_by_user_id=2, admin_override=True)
