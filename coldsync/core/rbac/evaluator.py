"""Authorization decisions for ColdSync.

Every public function here is a pure, synchronous decision over its
arguments. There is no state machine and no history: the same inputs always
produce the same answer, and concurrent callers need no coordination.

All checks follow the same order:

1. Platform override. A platform identity gets the most permissive answer
   without its organization role being consulted (it may not have one).
2. Resolve the caller's (and target's) role. Missing or unrecognized roles
   deny; they do not fall back to ``DEFAULT_ROLE``.
3. Structural exclusions, e.g. nobody manages their own membership.
4. Hierarchy as an upper bound, narrowed by the role's matrix entry.

Nothing in this module raises; indeterminate input is denied.
"""

import logging
from typing import Any, NamedTuple, Optional, Tuple

from ...common.logger import get_logger
from . import hierarchy
from .permissions import (
    AppRoute,
    TabId,
    grants,
    lookup,
    parse_resource,
    parse_route,
    parse_tab,
)
from .roles import CanonicalRole, RoleInput, resolve_role

logger = get_logger("rbac.evaluator")
decision_logger = get_logger("rbac.evaluator.decisions")

# Denial / grant reasons
PLATFORM_OVERRIDE = "platform override"
MISSING_ROLE = "missing role"
UNRECOGNIZED_ROLE = "unrecognized role"
UNRECOGNIZED_TARGET = "unrecognized target role"
UNRECOGNIZED_RESOURCE = "unrecognized resource"
UNRECOGNIZED_ROUTE = "unrecognized route"
UNRECOGNIZED_TAB = "unrecognized tab"
SELF_MANAGEMENT = "self-management"
OUTSIDE_HIERARCHY = "outside hierarchy"
NOT_GRANTED = "not granted by matrix"
GRANTED = "granted by matrix"


class PermissionResult(NamedTuple):
    """Outcome of a permission check, with the reason behind it."""
    allowed: bool
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.allowed


def _allow(reason: str) -> PermissionResult:
    return PermissionResult(True, reason)


def _deny(reason: str) -> PermissionResult:
    return PermissionResult(False, reason)


def _record(check: str, result: PermissionResult, **context: Any) -> PermissionResult:
    if decision_logger.isEnabledFor(logging.DEBUG):
        details = " ".join(f"{k}={v!r}" for k, v in context.items())
        decision_logger.debug(
            "%s %s (%s) %s",
            check,
            "allow" if result.allowed else "deny",
            result.reason,
            details,
        )
    return result


def _resolve_caller(role: RoleInput) -> Tuple[Optional[CanonicalRole], Optional[str]]:
    if role is None or role == "":
        return None, MISSING_ROLE
    resolved = resolve_role(role)
    if resolved is None:
        return None, UNRECOGNIZED_ROLE
    return resolved, None


# Resources

def explain_view_resource(role: RoleInput, resource: Any, is_platform_user: bool) -> PermissionResult:
    """Check if a caller can view a resource kind, with the reason."""
    if is_platform_user:
        return _record("view_resource", _allow(PLATFORM_OVERRIDE), resource=resource)

    caller, reason = _resolve_caller(role)
    if caller is None:
        return _record("view_resource", _deny(reason), role=role, resource=resource)

    parsed = parse_resource(resource)
    if parsed is None:
        return _record("view_resource", _deny(UNRECOGNIZED_RESOURCE), role=role, resource=resource)

    perms = lookup(caller)
    flags = perms.resources.get(parsed) if perms else None
    result = _allow(GRANTED) if flags is not None and flags.view else _deny(NOT_GRANTED)
    return _record("view_resource", result, role=caller.value, resource=parsed.value)


def can_view_resource(role: RoleInput, resource: Any, is_platform_user: bool) -> bool:
    """Check if a caller can view a resource kind.

    Args:
        role: Caller's organization role (code or legacy label)
        resource: PermissionResource or its string value
        is_platform_user: Caller holds an active platform membership

    Returns:
        True if the matrix grants view on the resource
    """
    return explain_view_resource(role, resource, is_platform_user).allowed


# User management

_USER_CHECKS = {
    "view_user": "can_view",
    "manage_user": "can_manage",
    "modify_role": "can_modify_role",
}


def _explain_user_check(
    check: str,
    current_role: RoleInput,
    target_role: RoleInput,
    is_platform_user: bool,
) -> PermissionResult:
    if is_platform_user:
        return _record(check, _allow(PLATFORM_OVERRIDE), target=target_role)

    caller, reason = _resolve_caller(current_role)
    if caller is None:
        return _record(check, _deny(reason), role=current_role, target=target_role)

    target = resolve_role(target_role)
    if target is None:
        return _record(check, _deny(UNRECOGNIZED_TARGET), role=caller.value, target=target_role)

    if not hierarchy.can_manage(caller, target):
        return _record(check, _deny(OUTSIDE_HIERARCHY), role=caller.value, target=target.value)

    perms = lookup(caller)
    if perms is None:
        return _record(check, _deny(NOT_GRANTED), role=caller.value, target=target.value)

    access = getattr(perms.user_management, _USER_CHECKS[check])
    result = _allow(GRANTED) if grants(access, target) else _deny(NOT_GRANTED)
    return _record(check, result, role=caller.value, target=target.value)


def explain_view_user(current_role: RoleInput, target_role: RoleInput, is_platform_user: bool) -> PermissionResult:
    return _explain_user_check("view_user", current_role, target_role, is_platform_user)


def explain_manage_user(
    current_role: RoleInput,
    target_role: RoleInput,
    is_platform_user: bool,
    is_current_user: bool,
) -> PermissionResult:
    # Self-management is excluded before anything else, platform users included
    if is_current_user:
        return _record("manage_user", _deny(SELF_MANAGEMENT), role=current_role, target=target_role)
    return _explain_user_check("manage_user", current_role, target_role, is_platform_user)


def explain_modify_role(current_role: RoleInput, target_role: RoleInput, is_platform_user: bool) -> PermissionResult:
    return _explain_user_check("modify_role", current_role, target_role, is_platform_user)


def can_view_user(current_role: RoleInput, target_role: RoleInput, is_platform_user: bool) -> bool:
    """Check if the caller may see a user holding ``target_role``."""
    return explain_view_user(current_role, target_role, is_platform_user).allowed


def can_manage_user(
    current_role: RoleInput,
    target_role: RoleInput,
    is_platform_user: bool,
    is_current_user: bool,
) -> bool:
    """Check if the caller may edit, suspend or delete a user holding ``target_role``.

    Args:
        current_role: Caller's organization role
        target_role: Target user's role
        is_platform_user: Caller holds an active platform membership
        is_current_user: Target is the caller themself

    Returns:
        True if the caller may manage the target
    """
    return explain_manage_user(current_role, target_role, is_platform_user, is_current_user).allowed


def can_modify_role(current_role: RoleInput, target_role: RoleInput, is_platform_user: bool) -> bool:
    """Check if the caller may change the role of a user holding ``target_role``."""
    return explain_modify_role(current_role, target_role, is_platform_user).allowed


def get_available_roles_for_assignment(role: RoleInput, is_platform_user: bool) -> list[CanonicalRole]:
    """Roles the caller may grant when inviting or editing a user.

    Platform users get every canonical role. Everyone else gets the roles
    both strictly below them in the hierarchy and listed as assignable in
    their matrix entry. Order is always descending privilege.
    """
    if is_platform_user:
        return list(CanonicalRole)

    caller, _ = _resolve_caller(role)
    perms = lookup(caller)
    if caller is None or perms is None:
        return []

    assignable = perms.user_management.assignable_roles
    return [
        candidate
        for candidate in CanonicalRole
        if hierarchy.can_manage(caller, candidate) and candidate in assignable
    ]


# Navigation

def explain_tab_access(role: RoleInput, tab_id: Any, is_platform_user: bool) -> PermissionResult:
    if is_platform_user:
        return _record("tab_access", _allow(PLATFORM_OVERRIDE), tab=tab_id)

    caller, reason = _resolve_caller(role)
    if caller is None:
        return _record("tab_access", _deny(reason), role=role, tab=tab_id)

    tab = parse_tab(tab_id)
    if tab is None:
        return _record("tab_access", _deny(UNRECOGNIZED_TAB), role=caller.value, tab=tab_id)

    perms = lookup(caller)
    allowed = bool(perms and perms.tabs.get(tab, False))
    return _record(
        "tab_access",
        _allow(GRANTED) if allowed else _deny(NOT_GRANTED),
        role=caller.value,
        tab=tab.value,
    )


def can_access_tab(role: RoleInput, tab_id: Any, is_platform_user: bool) -> bool:
    """Check if the caller may open a Settings tab (legacy tab ids accepted)."""
    return explain_tab_access(role, tab_id, is_platform_user).allowed


def explain_route_access(role: RoleInput, route: Any, is_platform_user: bool) -> PermissionResult:
    if is_platform_user:
        return _record("route_access", _allow(PLATFORM_OVERRIDE), route=route)

    caller, reason = _resolve_caller(role)
    if caller is None:
        return _record("route_access", _deny(reason), role=role, route=route)

    parsed = parse_route(route)
    if parsed is None:
        return _record("route_access", _deny(UNRECOGNIZED_ROUTE), role=caller.value, route=route)

    perms = lookup(caller)
    allowed = bool(perms and perms.routes.get(parsed, False))
    return _record(
        "route_access",
        _allow(GRANTED) if allowed else _deny(NOT_GRANTED),
        role=caller.value,
        route=parsed.value,
    )


def can_access_route(role: RoleInput, route: Any, is_platform_user: bool) -> bool:
    """Check if the caller may open an application section."""
    return explain_route_access(role, route, is_platform_user).allowed


def get_accessible_routes(role: RoleInput, is_platform_user: bool) -> list[AppRoute]:
    """Routes to show in navigation, in declaration order."""
    return [route for route in AppRoute if can_access_route(role, route, is_platform_user)]


def get_accessible_tabs(role: RoleInput, is_platform_user: bool) -> list[TabId]:
    """Settings tabs to show, in declaration order."""
    return [tab for tab in TabId if can_access_tab(role, tab, is_platform_user)]
