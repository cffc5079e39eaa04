"""Canonical roles and role normalization for ColdSync.

Seven roles in three tiers:

    Platform      DEV, PLATFORM_ADMIN   (cross-tenant, highest privilege)
    Organization  OWNER, ADMIN, STAFF, DRIVER
    External      CARRIER               (non-employee participant)

Roles reach the engine either as canonical codes ("OWNER") or as the legacy
Spanish display labels stored by older membership records ("Propietario").
Both forms are reduced to a ``CanonicalRole`` before any decision is taken.
"""

from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Union

from ...common.logger import get_logger

logger = get_logger("rbac.roles")


class PolicyConfigurationError(ValueError):
    """Raised at import time when a policy table is not exhaustive."""


class CanonicalRole(str, Enum):
    """Normalized role identifiers, declared in descending privilege order."""

    DEV = "DEV"
    PLATFORM_ADMIN = "PLATFORM_ADMIN"
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    STAFF = "STAFF"
    DRIVER = "DRIVER"
    CARRIER = "CARRIER"

    def __str__(self) -> str:
        return self.value


class RoleTier(str, Enum):
    """Scope a role applies to."""

    PLATFORM = "platform"
    ORGANIZATION = "organization"
    EXTERNAL = "external"


RoleInput = Union[CanonicalRole, str, None]

PLATFORM_ROLES = frozenset([CanonicalRole.DEV, CanonicalRole.PLATFORM_ADMIN])
ORGANIZATION_ROLES = frozenset([
    CanonicalRole.OWNER,
    CanonicalRole.ADMIN,
    CanonicalRole.STAFF,
    CanonicalRole.DRIVER,
])
EXTERNAL_ROLES = frozenset([CanonicalRole.CARRIER])

# Fallback for unrecognized input: the lowest organization role
DEFAULT_ROLE = CanonicalRole.DRIVER

# Legacy display labels -> canonical codes. Must stay 1:1.
LEGACY_ROLE_LABELS: Mapping[str, CanonicalRole] = MappingProxyType({
    "Desarrollador": CanonicalRole.DEV,
    "Propietario": CanonicalRole.OWNER,
    "Administrador": CanonicalRole.ADMIN,
    "Personal": CanonicalRole.STAFF,
    "Conductor": CanonicalRole.DRIVER,
    "Transportista": CanonicalRole.CARRIER,
})

# Roles that never had a legacy label
UNLABELLED_ROLES = frozenset([CanonicalRole.PLATFORM_ADMIN])

_CODES: Mapping[str, CanonicalRole] = MappingProxyType(
    {role.value: role for role in CanonicalRole}
)


def _invert_labels(labels: Mapping[str, CanonicalRole]) -> Mapping[CanonicalRole, str]:
    """Build the canonical -> label table, verifying the mapping is a bijection."""
    inverse: dict[CanonicalRole, str] = {}
    for label, role in labels.items():
        if label in _CODES:
            raise PolicyConfigurationError(
                f"Legacy label {label!r} shadows a canonical role code"
            )
        if role in inverse:
            raise PolicyConfigurationError(
                f"Role {role.value} has two legacy labels: {inverse[role]!r}, {label!r}"
            )
        inverse[role] = label

    missing = set(CanonicalRole) - UNLABELLED_ROLES - set(inverse)
    if missing:
        raise PolicyConfigurationError(
            "Legacy label table is incomplete, missing: "
            + ", ".join(sorted(r.value for r in missing))
        )
    return MappingProxyType(inverse)


ROLE_LABELS: Mapping[CanonicalRole, str] = _invert_labels(LEGACY_ROLE_LABELS)


def resolve_role(raw: RoleInput) -> Optional[CanonicalRole]:
    """Resolve a code or legacy label to a canonical role.

    Unlike ``normalize`` this does not apply the default: anything that is not
    a canonical code or a known legacy label yields ``None``.
    """
    if isinstance(raw, CanonicalRole):
        return raw
    if not isinstance(raw, str):
        return None

    role = _CODES.get(raw) or LEGACY_ROLE_LABELS.get(raw)
    if role is None:
        logger.debug("Unrecognized role string: %r", raw)
    return role


def normalize(raw: RoleInput) -> CanonicalRole:
    """Reduce any role representation to a canonical role.

    Total and pure: accepts canonical codes and legacy labels, and maps
    everything else (including missing values) to ``DEFAULT_ROLE``.
    """
    role = resolve_role(raw)
    if role is None:
        return DEFAULT_ROLE
    return role


def is_recognized_role(raw: RoleInput) -> bool:
    return resolve_role(raw) is not None


def is_platform_role(role: RoleInput) -> bool:
    """Check if a role is a platform role (DEV or PLATFORM_ADMIN)."""
    return resolve_role(role) in PLATFORM_ROLES


def is_organization_role(role: RoleInput) -> bool:
    """Check if a role is an organization role.

    CARRIER is external and belongs to neither tier set.
    """
    return resolve_role(role) in ORGANIZATION_ROLES


def role_tier(role: RoleInput) -> Optional[RoleTier]:
    resolved = resolve_role(role)
    if resolved in PLATFORM_ROLES:
        return RoleTier.PLATFORM
    if resolved in ORGANIZATION_ROLES:
        return RoleTier.ORGANIZATION
    if resolved in EXTERNAL_ROLES:
        return RoleTier.EXTERNAL
    return None


def label_for(role: RoleInput) -> str:
    """Display label for a role, falling back to its canonical code."""
    resolved = normalize(role)
    return ROLE_LABELS.get(resolved, resolved.value)


def is_platform_identity(platform_role: RoleInput, is_active: bool) -> bool:
    """Derive the ``is_platform_user`` flag from a platform membership record.

    Only an active record holding a platform role counts.
    """
    return bool(is_active) and is_platform_role(platform_role)
