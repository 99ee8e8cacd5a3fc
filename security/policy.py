"""
Ownership/admin decisions for venues, images and reports.

Every check returns a plain bool so services decide which error to raise.
Two behaviours are deliberately left as switches until the product decides:

* venue edit is open to any authenticated user (``owner_only=False``);
* image delete is uploader-only, admins get no override
  (``admin_override=False``).
"""


def _is_owner(caller_id, owner_id) -> bool:
    return caller_id is not None and owner_id is not None and caller_id == owner_id


def can_mutate_venue(caller_id, caller_is_admin: bool, owner_user_id, owner_only: bool = False) -> bool:
    if caller_id is None:
        return False
    if not owner_only:
        return True
    return caller_is_admin or _is_owner(caller_id, owner_user_id)


def can_delete_venue(caller_id, caller_is_admin: bool, owner_user_id) -> bool:
    if caller_id is None:
        return False
    return caller_is_admin or _is_owner(caller_id, owner_user_id)


def can_view_reports(caller_id, caller_is_admin: bool, owner_user_id) -> bool:
    if caller_id is None:
        return False
    return caller_is_admin or _is_owner(caller_id, owner_user_id)


def can_list_all_reports(caller_is_admin: bool) -> bool:
    return bool(caller_is_admin)


def can_delete_image(caller_id, caller_is_admin: bool, uploaded_by_user_id, admin_override: bool = False) -> bool:
    if caller_id is None:
        return False
    if admin_override and caller_is_admin:
        return True
    return _is_owner(caller_id, uploaded_by_user_id)
