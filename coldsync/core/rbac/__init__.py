"""RBAC (Role-Based Access Control) engine for ColdSync.

Single source of truth for:
- canonical roles and legacy label mapping (``roles``)
- the role hierarchy (``hierarchy``)
- the permission matrix (``permissions``)
- authorization decisions (``evaluator``, ``checker``)

The engine is advisory: it returns decisions, callers enforce them.
"""

from .roles import (
    CanonicalRole,
    RoleTier,
    PolicyConfigurationError,
    DEFAULT_ROLE,
    LEGACY_ROLE_LABELS,
    normalize,
    resolve_role,
    is_platform_role,
    is_organization_role,
    is_platform_identity,
    label_for,
)
from .hierarchy import ROLE_HIERARCHY, level_of, compare, can_manage
from .permissions import (
    AppRoute,
    PermissionAction,
    PermissionResource,
    TabId,
    ResourcePermissionSet,
    RolePermissions,
    UserManagementPolicy,
    FullAccess,
    RestrictedTo,
    NoAccess,
    PERMISSION_MATRIX,
    lookup,
    get_role_permissions,
    has_resource_permission,
    has_route_access,
    has_tab_access,
)
from .evaluator import (
    PermissionResult,
    can_view_resource,
    can_view_user,
    can_manage_user,
    can_modify_role,
    get_available_roles_for_assignment,
    can_access_tab,
    can_access_route,
    get_accessible_routes,
    get_accessible_tabs,
)
from .checker import PermissionChecker

__all__ = [
    "CanonicalRole",
    "RoleTier",
    "PolicyConfigurationError",
    "DEFAULT_ROLE",
    "LEGACY_ROLE_LABELS",
    "normalize",
    "resolve_role",
    "is_platform_role",
    "is_organization_role",
    "is_platform_identity",
    "label_for",
    "ROLE_HIERARCHY",
    "level_of",
    "compare",
    "can_manage",
    "AppRoute",
    "PermissionAction",
    "PermissionResource",
    "TabId",
    "ResourcePermissionSet",
    "RolePermissions",
    "UserManagementPolicy",
    "FullAccess",
    "RestrictedTo",
    "NoAccess",
    "PERMISSION_MATRIX",
    "lookup",
    "get_role_permissions",
    "has_resource_permission",
    "has_route_access",
    "has_tab_access",
    "PermissionResult",
    "can_view_resource",
    "can_view_user",
    "can_manage_user",
    "can_modify_role",
    "get_available_roles_for_assignment",
    "can_access_tab",
    "can_access_route",
    "get_accessible_routes",
    "get_accessible_tabs",
    "PermissionChecker",
]
