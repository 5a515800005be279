"""Navigation entries offered to anonymous visitors, clients and staff."""
from __future__ import annotations

from typing import Iterable, List

from .models import STAFF_ROLES, RoleEnum

ANONYMOUS_ITEMS = [
    {"label": "Rooms", "path": "/rooms"},
    {"label": "Sign in", "path": "/auth"},
]

CLIENT_ITEMS = [
    {"label": "Rooms", "path": "/rooms"},
    {"label": "My bookings", "path": "/bookings"},
    {"label": "Profile", "path": "/profile"},
    {"label": "Sign out", "path": "/logout"},
]

DASHBOARD_ITEM = {"label": "Dashboard", "path": "/dashboard"}


def navigation_for(roles: Iterable[RoleEnum] | None) -> List[dict[str, str]]:
    if roles is None:
        return [dict(item) for item in ANONYMOUS_ITEMS]
    items = [dict(item) for item in CLIENT_ITEMS]
    if STAFF_ROLES.intersection(roles):
        items.insert(2, dict(DASHBOARD_ITEM))
    return items
