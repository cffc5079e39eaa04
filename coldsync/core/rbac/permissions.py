"""Permission matrix for ColdSync RBAC.

One immutable ``RolePermissions`` entry per canonical role, declaring:
  - CRUD flags per protected resource
  - access flags per application route
  - visibility flags per Settings tab
  - a user-management policy (who the role may view, manage, re-role and
    which roles it may hand out)

User-management predicates are data, not code: each is one of the tagged
variants ``FullAccess``, ``RestrictedTo(roles)`` or ``NoAccess``, evaluated by
``grants``. The evaluator always bounds them by the role hierarchy, so
``FullAccess`` means "everyone strictly below me", never "everyone".
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, NamedTuple, Optional, Type, TypeVar, Union

from ...common.logger import get_logger
from .roles import CanonicalRole, PolicyConfigurationError, RoleInput, resolve_role

logger = get_logger("rbac.matrix")


class PermissionResource(str, Enum):
    """Resource kinds protected by the matrix."""

    USERS = "users"
    PRODUCTS = "products"
    THERMAL_PROFILES = "thermalProfiles"
    ORGANIZATIONS = "organizations"
    LANES = "lanes"
    DISPATCH = "dispatch"
    REPORTS = "reports"


class PermissionAction(str, Enum):
    """Actions on a resource. MANAGE means all four CRUD flags."""

    VIEW = "view"
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"
    MANAGE = "manage"


class AppRoute(str, Enum):
    """Top-level application sections."""

    DASHBOARD = "dashboard"
    DISPATCH = "dispatch"
    CONTROL_TOWER = "control-tower"
    FINANCIALS = "financials"
    CARRIERS = "carriers"
    LOCATIONS = "locations"
    LANES = "lanes"
    ORDERS = "orders"
    ALERTS = "alerts"
    SETTINGS = "settings"
    PROFILE = "profile"


class TabId(str, Enum):
    """Tabs inside the Settings section."""

    ORGANIZATIONS = "organizations"
    USERS = "users"
    PRODUCTS = "products"
    THERMAL_PROFILES = "thermal-profiles"


# Tab ids used by the original Spanish UI
LEGACY_TAB_IDS: Mapping[str, TabId] = MappingProxyType({
    "organizaciones": TabId.ORGANIZATIONS,
    "usuarios": TabId.USERS,
    "productos": TabId.PRODUCTS,
    "perfil-termico": TabId.THERMAL_PROFILES,
})

if set(LEGACY_TAB_IDS.values()) != set(TabId) or len(LEGACY_TAB_IDS) != len(TabId):
    raise PolicyConfigurationError("Legacy tab id table must map 1:1 onto TabId")


class ResourcePermissionSet(NamedTuple):
    """CRUD flags for one (role, resource) pair."""
    view: bool
    create: bool
    edit: bool
    delete: bool

    def allows(self, action: PermissionAction) -> bool:
        if action is PermissionAction.MANAGE:
            return all(self)
        return bool(getattr(self, action.value))

    def to_dict(self) -> Dict[str, bool]:
        return self._asdict()


FULL = ResourcePermissionSet(view=True, create=True, edit=True, delete=True)
READ_ONLY = ResourcePermissionSet(view=True, create=False, edit=False, delete=False)
NONE = ResourcePermissionSet(view=False, create=False, edit=False, delete=False)


@dataclass(frozen=True)
class FullAccess:
    """Every role the hierarchy allows."""

    def describe(self) -> Any:
        return "full"


@dataclass(frozen=True)
class RestrictedTo:
    """Only the listed roles (still bounded by the hierarchy)."""
    roles: frozenset

    def describe(self) -> Any:
        return [role.value for role in CanonicalRole if role in self.roles]


@dataclass(frozen=True)
class NoAccess:
    """No target role at all."""

    def describe(self) -> Any:
        return "none"


UserAccess = Union[FullAccess, RestrictedTo, NoAccess]

FULL_ACCESS = FullAccess()
NO_ACCESS = NoAccess()


def restricted_to(*roles: CanonicalRole) -> RestrictedTo:
    return RestrictedTo(frozenset(roles))


def grants(access: UserAccess, target: CanonicalRole) -> bool:
    """Interpret a user-management predicate for one target role."""
    if isinstance(access, FullAccess):
        return True
    if isinstance(access, RestrictedTo):
        return target in access.roles
    if isinstance(access, NoAccess):
        return False
    logger.debug("Unknown user access variant %r treated as NoAccess", access)
    return False


class UserManagementPolicy(NamedTuple):
    """What a role may do to other users' memberships."""
    can_view: UserAccess
    can_manage: UserAccess
    can_modify_role: UserAccess
    assignable_roles: frozenset

    def to_dict(self) -> Dict[str, Any]:
        return {
            "can_view": self.can_view.describe(),
            "can_manage": self.can_manage.describe(),
            "can_modify_role": self.can_modify_role.describe(),
            "assignable_roles": [
                role.value for role in CanonicalRole if role in self.assignable_roles
            ],
        }


@dataclass(frozen=True)
class RolePermissions:
    """Complete permission set for one role."""
    resources: Mapping[PermissionResource, ResourcePermissionSet]
    routes: Mapping[AppRoute, bool]
    tabs: Mapping[TabId, bool]
    user_management: UserManagementPolicy

    def to_dict(self) -> Dict[str, Any]:
        """Plain-data view, used for matrix exports."""
        return {
            "resources": {r.value: p.to_dict() for r, p in self.resources.items()},
            "routes": {r.value: allowed for r, allowed in self.routes.items()},
            "tabs": {t.value: allowed for t, allowed in self.tabs.items()},
            "user_management": self.user_management.to_dict(),
        }


def _resources(
    default: ResourcePermissionSet,
    **overrides: ResourcePermissionSet,
) -> Mapping[PermissionResource, ResourcePermissionSet]:
    """Build a full resource table from a default plus per-resource overrides.

    Override keywords are the enum member names in lower case
    (``thermal_profiles=NONE``).
    """
    table = {resource: default for resource in PermissionResource}
    for name, perms in overrides.items():
        table[PermissionResource[name.upper()]] = perms
    return MappingProxyType(table)


def _flags(enum_cls, allowed: Iterable) -> Mapping:
    allowed = frozenset(allowed)
    return MappingProxyType({member: member in allowed for member in enum_cls})


def _routes_except(*denied: AppRoute) -> Mapping[AppRoute, bool]:
    return _flags(AppRoute, (r for r in AppRoute if r not in denied))


def _tabs(*allowed: TabId) -> Mapping[TabId, bool]:
    return _flags(TabId, allowed)


_PLATFORM_PERMISSIONS = RolePermissions(
    resources=_resources(FULL),
    routes=_routes_except(),
    tabs=_tabs(*TabId),
    user_management=UserManagementPolicy(
        can_view=FULL_ACCESS,
        can_manage=FULL_ACCESS,
        can_modify_role=FULL_ACCESS,
        assignable_roles=frozenset([
            CanonicalRole.OWNER,
            CanonicalRole.ADMIN,
            CanonicalRole.STAFF,
            CanonicalRole.DRIVER,
        ]),
    ),
)

_OWNER_PERMISSIONS = RolePermissions(
    # Own organization can be viewed and edited, never created or deleted
    resources=_resources(
        FULL,
        organizations=ResourcePermissionSet(view=True, create=False, edit=True, delete=False),
    ),
    routes=_routes_except(),
    tabs=_tabs(*TabId),
    user_management=UserManagementPolicy(
        can_view=FULL_ACCESS,
        can_manage=FULL_ACCESS,
        can_modify_role=FULL_ACCESS,
        assignable_roles=frozenset([
            CanonicalRole.ADMIN,
            CanonicalRole.STAFF,
            CanonicalRole.DRIVER,
        ]),
    ),
)

_ADMIN_PERMISSIONS = RolePermissions(
    resources=_resources(FULL, organizations=NONE),
    routes=_routes_except(),
    tabs=_tabs(TabId.USERS, TabId.PRODUCTS, TabId.THERMAL_PROFILES),
    user_management=UserManagementPolicy(
        can_view=restricted_to(CanonicalRole.STAFF, CanonicalRole.DRIVER),
        can_manage=restricted_to(CanonicalRole.STAFF, CanonicalRole.DRIVER),
        can_modify_role=restricted_to(CanonicalRole.STAFF, CanonicalRole.DRIVER),
        assignable_roles=frozenset([CanonicalRole.STAFF, CanonicalRole.DRIVER]),
    ),
)

_STAFF_PERMISSIONS = RolePermissions(
    resources=_resources(
        FULL,
        products=NONE,
        thermal_profiles=NONE,
        organizations=NONE,
    ),
    # Users tab is reachable even though the Settings route is not
    routes=_routes_except(AppRoute.FINANCIALS, AppRoute.ORDERS, AppRoute.SETTINGS),
    tabs=_tabs(TabId.USERS),
    user_management=UserManagementPolicy(
        can_view=restricted_to(CanonicalRole.DRIVER),
        can_manage=restricted_to(CanonicalRole.DRIVER),
        can_modify_role=restricted_to(CanonicalRole.DRIVER),
        assignable_roles=frozenset([CanonicalRole.DRIVER]),
    ),
)

_NO_USER_MANAGEMENT = UserManagementPolicy(
    can_view=NO_ACCESS,
    can_manage=NO_ACCESS,
    can_modify_role=NO_ACCESS,
    assignable_roles=frozenset(),
)

_DRIVER_PERMISSIONS = RolePermissions(
    resources=_resources(
        NONE,
        lanes=READ_ONLY,
        dispatch=READ_ONLY,
        reports=READ_ONLY,
    ),
    routes=_routes_except(AppRoute.FINANCIALS, AppRoute.SETTINGS),
    tabs=_tabs(),
    user_management=_NO_USER_MANAGEMENT,
)

_CARRIER_PERMISSIONS = RolePermissions(
    resources=_resources(
        NONE,
        lanes=READ_ONLY,
        dispatch=READ_ONLY,
        reports=READ_ONLY,
    ),
    # Loadboard yes; other carriers and live fleet tracking no
    routes=_routes_except(
        AppRoute.CONTROL_TOWER,
        AppRoute.FINANCIALS,
        AppRoute.CARRIERS,
        AppRoute.SETTINGS,
    ),
    tabs=_tabs(),
    user_management=_NO_USER_MANAGEMENT,
)


PERMISSION_MATRIX: Mapping[CanonicalRole, RolePermissions] = MappingProxyType({
    # Platform roles
    CanonicalRole.DEV: _PLATFORM_PERMISSIONS,
    CanonicalRole.PLATFORM_ADMIN: _PLATFORM_PERMISSIONS,
    # Organization roles
    CanonicalRole.OWNER: _OWNER_PERMISSIONS,
    CanonicalRole.ADMIN: _ADMIN_PERMISSIONS,
    CanonicalRole.STAFF: _STAFF_PERMISSIONS,
    CanonicalRole.DRIVER: _DRIVER_PERMISSIONS,
    # External roles
    CanonicalRole.CARRIER: _CARRIER_PERMISSIONS,
})


def _validate_matrix(matrix: Mapping[CanonicalRole, RolePermissions]) -> None:
    """Fail the import if any role, resource, route or tab is missing."""
    missing_roles = set(CanonicalRole) - set(matrix)
    if missing_roles:
        raise PolicyConfigurationError(
            "Permission matrix is missing roles: "
            + ", ".join(sorted(r.value for r in missing_roles))
        )
    for role, perms in matrix.items():
        for enum_cls, table in (
            (PermissionResource, perms.resources),
            (AppRoute, perms.routes),
            (TabId, perms.tabs),
        ):
            if set(table) != set(enum_cls):
                raise PolicyConfigurationError(
                    f"Permission matrix entry for {role.value} has an incomplete "
                    f"{enum_cls.__name__} table"
                )


_validate_matrix(PERMISSION_MATRIX)


E = TypeVar("E", bound=Enum)


def _coerce(enum_cls: Type[E], value: Any, aliases: Optional[Mapping[str, E]] = None) -> Optional[E]:
    if isinstance(value, enum_cls):
        return value
    if not isinstance(value, str):
        return None
    try:
        return enum_cls(value)
    except ValueError:
        pass
    if aliases and value in aliases:
        return aliases[value]
    logger.debug("Unrecognized %s identifier: %r", enum_cls.__name__, value)
    return None


def parse_resource(value: Any) -> Optional[PermissionResource]:
    return _coerce(PermissionResource, value)


def parse_action(value: Any) -> Optional[PermissionAction]:
    return _coerce(PermissionAction, value)


def parse_route(value: Any) -> Optional[AppRoute]:
    return _coerce(AppRoute, value)


def parse_tab(value: Any) -> Optional[TabId]:
    """Parse a tab id, accepting the legacy Spanish ids as well."""
    return _coerce(TabId, value, LEGACY_TAB_IDS)


def lookup(role: Any) -> Optional[RolePermissions]:
    """Matrix entry for a canonical role; None for anything else."""
    if not isinstance(role, CanonicalRole):
        return None
    return PERMISSION_MATRIX.get(role)


def get_role_permissions(role: RoleInput) -> Optional[RolePermissions]:
    """Matrix entry for a canonical code or legacy label.

    Returns None for missing or unrecognized roles.
    """
    return lookup(resolve_role(role))


def has_resource_permission(role: RoleInput, resource: Any, action: Any) -> bool:
    """Check a CRUD flag. Unknown role, resource or action all yield False."""
    perms = get_role_permissions(role)
    parsed_resource = parse_resource(resource)
    parsed_action = parse_action(action)
    if perms is None or parsed_resource is None or parsed_action is None:
        return False

    flags = perms.resources.get(parsed_resource)
    if flags is None:
        return False
    return flags.allows(parsed_action)


def has_route_access(role: RoleInput, route: Any) -> bool:
    perms = get_role_permissions(role)
    parsed = parse_route(route)
    if perms is None or parsed is None:
        return False
    return perms.routes.get(parsed, False)


def has_tab_access(role: RoleInput, tab: Any) -> bool:
    perms = get_role_permissions(role)
    parsed = parse_tab(tab)
    if perms is None or parsed is None:
        return False
    return perms.tabs.get(parsed, False)


def matrix_as_dict() -> Dict[str, Dict[str, Any]]:
    """Whole matrix as plain data, keyed by role code in privilege order."""
    return {role.value: PERMISSION_MATRIX[role].to_dict() for role in CanonicalRole}
