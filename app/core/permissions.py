"""
Account-level permissions.

These decide what an account may do anywhere on the platform. Rights inside
a single project (deciding team requests, pinning discussions, managing
tasks) come from the member's team role, see app.core.constants.
"""

from typing import Iterable, List, Union


class Permissions:
    USER_READ = "user:read"
    # See every profile regardless of its privacy settings
    USER_READ_ALL = "user:read_all"

    PROJECT_CREATE = "project:create"
    PROJECT_READ = "project:read"
    # See private projects without being on the team
    PROJECT_READ_ALL = "project:read_all"
    # Edit or delete projects the account does not own
    PROJECT_UPDATE = "project:update"
    PROJECT_DELETE = "project:delete"

    TEAM_REQUEST = "team:request"
    CONNECTION_MANAGE = "connection:manage"
    POST_CREATE = "post:create"


ALL_PERMISSIONS: List[str] = [
    value
    for name, value in vars(Permissions).items()
    if name.isupper() and isinstance(value, str)
]

PRESET_ADMIN: List[str] = ALL_PERMISSIONS.copy()

# Granted on signup
PRESET_USER: List[str] = [
    Permissions.USER_READ,
    Permissions.PROJECT_CREATE,
    Permissions.PROJECT_READ,
    Permissions.TEAM_REQUEST,
    Permissions.CONNECTION_MANAGE,
    Permissions.POST_CREATE,
]


def has_permission(
    user_permissions: Iterable[str],
    required: Union[str, List[str]],
    require_all: bool = False,
) -> bool:
    """True if the account holds any (or, with require_all, every) required permission."""
    granted = set(user_permissions)
    if isinstance(required, str):
        required = [required]
    if require_all:
        return all(perm in granted for perm in required)
    return any(perm in granted for perm in required)
