"""Tests for the role hierarchy."""

import itertools

import pytest

from coldsync.core.rbac.hierarchy import (
    ROLE_HIERARCHY,
    level_of,
    compare,
    can_manage,
    roles_below,
)
from coldsync.core.rbac.roles import CanonicalRole

ROLES = list(CanonicalRole)
PAIRS = list(itertools.product(ROLES, repeat=2))


class TestLevels:
    """Test level assignment."""

    def test_every_role_has_a_level(self):
        assert set(ROLE_HIERARCHY) == set(CanonicalRole)

    def test_platform_above_organization_above_external(self):
        assert level_of("DEV") > level_of("PLATFORM_ADMIN") > level_of("OWNER")
        assert level_of("OWNER") > level_of("ADMIN") > level_of("STAFF") > level_of("DRIVER")
        assert level_of("CARRIER") == level_of("DRIVER")

    def test_only_driver_and_carrier_tie(self):
        levels = [ROLE_HIERARCHY[r] for r in ROLES]
        ties = {
            frozenset((a, b))
            for a, b in PAIRS
            if a is not b and ROLE_HIERARCHY[a] == ROLE_HIERARCHY[b]
        }
        assert ties == {frozenset((CanonicalRole.DRIVER, CanonicalRole.CARRIER))}
        assert len(set(levels)) == len(levels) - 1

    def test_labels_use_the_same_level(self):
        assert level_of("Propietario") == level_of(CanonicalRole.OWNER)


class TestCompare:
    """compare() is a total preorder."""

    @pytest.mark.parametrize("role", ROLES)
    def test_reflexive(self, role):
        assert compare(role, role) == 0

    @pytest.mark.parametrize("a,b", PAIRS)
    def test_antisymmetric(self, a, b):
        assert compare(a, b) == -compare(b, a)
        assert compare(a, b) in (-1, 0, 1)

    def test_transitive(self):
        for a, b, c in itertools.product(ROLES, repeat=3):
            if compare(a, b) >= 0 and compare(b, c) >= 0:
                assert compare(a, c) >= 0

    def test_sign(self):
        assert compare("OWNER", "STAFF") == 1
        assert compare("STAFF", "OWNER") == -1
        assert compare("DRIVER", "CARRIER") == 0


class TestCanManage:
    """Management requires a strictly higher level."""

    @pytest.mark.parametrize("role", ROLES)
    def test_never_manages_self(self, role):
        assert not can_manage(role, role)

    def test_peers_do_not_manage_each_other(self):
        assert not can_manage("DRIVER", "CARRIER")
        assert not can_manage("CARRIER", "DRIVER")

    @pytest.mark.parametrize("a,b", PAIRS)
    def test_matches_levels(self, a, b):
        assert can_manage(a, b) == (ROLE_HIERARCHY[a] > ROLE_HIERARCHY[b])

    def test_cannot_manage_upward(self):
        assert can_manage("ADMIN", "STAFF")
        assert not can_manage("STAFF", "ADMIN")

    def test_roles_below(self):
        assert roles_below("ADMIN") == [
            CanonicalRole.STAFF,
            CanonicalRole.DRIVER,
            CanonicalRole.CARRIER,
        ]
        assert roles_below("DRIVER") == []


class TestUnrecognizedRoles:
    """Unrecognized roles sit at the bottom of the hierarchy."""

    def test_lowest_level(self, unknown_inputs):
        for value in unknown_inputs:
            assert level_of(value) == min(ROLE_HIERARCHY.values())

    @pytest.mark.parametrize("role", ROLES)
    def test_manages_nobody(self, role, unknown_inputs):
        for value in unknown_inputs:
            assert not can_manage(value, role)

    def test_no_roles_below(self, unknown_inputs):
        assert roles_below(None) == []
        for value in unknown_inputs:
            assert roles_below(value) == []
