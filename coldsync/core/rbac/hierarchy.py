"""Role hierarchy for ColdSync.

Higher level = higher privilege. DRIVER and CARRIER intentionally share the
bottom level: they are peers and neither manages the other.

    DEV             5
    PLATFORM_ADMIN  4
    OWNER           3
    ADMIN           2
    STAFF           1
    DRIVER          0
    CARRIER         0
"""

from types import MappingProxyType
from typing import Mapping

from .roles import CanonicalRole, PolicyConfigurationError, RoleInput, normalize

ROLE_HIERARCHY: Mapping[CanonicalRole, int] = MappingProxyType({
    CanonicalRole.DEV: 5,
    CanonicalRole.PLATFORM_ADMIN: 4,
    CanonicalRole.OWNER: 3,
    CanonicalRole.ADMIN: 2,
    CanonicalRole.STAFF: 1,
    CanonicalRole.DRIVER: 0,
    CanonicalRole.CARRIER: 0,
})

_missing = set(CanonicalRole) - set(ROLE_HIERARCHY)
if _missing:
    raise PolicyConfigurationError(
        "Role hierarchy is incomplete, missing: "
        + ", ".join(sorted(r.value for r in _missing))
    )


def level_of(role: RoleInput) -> int:
    """Hierarchy level of a role (codes and legacy labels are normalized)."""
    return ROLE_HIERARCHY[normalize(role)]


def compare(a: RoleInput, b: RoleInput) -> int:
    """Return -1, 0 or 1 as ``a`` ranks below, level with, or above ``b``."""
    diff = level_of(a) - level_of(b)
    return (diff > 0) - (diff < 0)


def can_manage(current: RoleInput, target: RoleInput) -> bool:
    """A role can only manage roles strictly below its own level.

    Always False for equal levels, including a role compared with itself.
    """
    return level_of(current) > level_of(target)


def roles_below(role: RoleInput) -> list[CanonicalRole]:
    """Roles ``role`` outranks, in descending privilege order."""
    return [candidate for candidate in CanonicalRole if can_manage(role, candidate)]
