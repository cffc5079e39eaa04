"""Per-caller permission checking for ColdSync.

``PermissionChecker`` binds one caller (role + platform flag) so route guards
and screens can ask several questions without repeating the identity.
"""

from typing import Any, List, Optional

from . import evaluator
from .permissions import AppRoute, PermissionAction, PermissionResource, TabId, has_resource_permission
from .roles import CanonicalRole, RoleInput, is_platform_identity, resolve_role


class PermissionChecker:
    """Checks what a single caller is allowed to do."""

    def __init__(self, role: RoleInput, is_platform_user: bool = False):
        """
        Initialize with the caller's identity.

        Args:
            role: Caller's organization role, as stored (code or legacy label)
            is_platform_user: Caller holds an active platform membership
        """
        self.raw_role = role
        self.role: Optional[CanonicalRole] = resolve_role(role)
        self.is_platform_user = bool(is_platform_user)

    @classmethod
    def from_memberships(
        cls,
        org_role: RoleInput,
        platform_role: RoleInput = None,
        platform_active: bool = False,
    ) -> "PermissionChecker":
        """Build a checker from organization and platform membership records."""
        return cls(org_role, is_platform_identity(platform_role, platform_active))

    def __repr__(self) -> str:
        return f"PermissionChecker(role={self.raw_role!r}, is_platform_user={self.is_platform_user})"

    def can(self, resource: Any, action: Any = PermissionAction.VIEW) -> bool:
        """Check a CRUD action on a resource kind."""
        if self.is_platform_user:
            return True
        if self.role is None:
            return False
        return has_resource_permission(self.role, resource, action)

    def can_view_resource(self, resource: Any) -> bool:
        return evaluator.can_view_resource(self.raw_role, resource, self.is_platform_user)

    def can_view_user(self, target_role: RoleInput) -> bool:
        return evaluator.can_view_user(self.raw_role, target_role, self.is_platform_user)

    def can_manage_user(self, target_role: RoleInput, is_current_user: bool = False) -> bool:
        return evaluator.can_manage_user(
            self.raw_role, target_role, self.is_platform_user, is_current_user
        )

    def can_modify_role(self, target_role: RoleInput) -> bool:
        return evaluator.can_modify_role(self.raw_role, target_role, self.is_platform_user)

    def can_access_tab(self, tab_id: Any) -> bool:
        return evaluator.can_access_tab(self.raw_role, tab_id, self.is_platform_user)

    def can_access_route(self, route: Any) -> bool:
        return evaluator.can_access_route(self.raw_role, route, self.is_platform_user)

    def assignable_roles(self) -> List[CanonicalRole]:
        return evaluator.get_available_roles_for_assignment(self.raw_role, self.is_platform_user)

    def accessible_routes(self) -> List[AppRoute]:
        return evaluator.get_accessible_routes(self.raw_role, self.is_platform_user)

    def accessible_tabs(self) -> List[TabId]:
        return evaluator.get_accessible_tabs(self.raw_role, self.is_platform_user)

    def get_accessible_resources(self, action: Any = PermissionAction.VIEW) -> List[PermissionResource]:
        """Resource kinds the caller can perform ``action`` on."""
        return [resource for resource in PermissionResource if self.can(resource, action)]
