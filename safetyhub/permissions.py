"""Permissions an admin may not be able to grant in certain configurations."""

from typing import FrozenSet

# Sensor permissions the profile owner cannot grant and the device owner may
# grant depending on its opt-out state.
ADMIN_RESTRICTED_SENSORS_PERMISSIONS: FrozenSet[str] = frozenset({
    "android.permission.ACCESS_FINE_LOCATION",
    "android.permission.ACCESS_BACKGROUND_LOCATION",
    "android.permission.ACCESS_COARSE_LOCATION",
    "android.permission.CAMERA",
    "android.permission.RECORD_AUDIO",
    "android.permission.ACTIVITY_RECOGNITION",
    "android.permission.BODY_SENSORS",
    "android.permission.BACKGROUND_CAMERA",
    "android.permission.RECORD_BACKGROUND_AUDIO",
})


def is_permission_restricted_for_admin(permission: str) -> bool:
    """Return whether ``permission`` is a sensor permission an admin may not control."""
    return permission in ADMIN_RESTRICTED_SENSORS_PERMISSIONS


def may_admin_grant_permission(permission: str, can_admin_grant_sensors_permissions: bool) -> bool:
    """Return whether the admin may grant ``permission``.

    Unrestricted permissions are always grantable; restricted ones only when
    the admin is allowed to grant sensor permissions.
    """
    if not is_permission_restricted_for_admin(permission):
        return True
    return can_admin_grant_sensors_permissions
