"""Tests for role normalization."""

import pytest

from coldsync.core.rbac.roles import (
    CanonicalRole,
    RoleTier,
    PolicyConfigurationError,
    DEFAULT_ROLE,
    LEGACY_ROLE_LABELS,
    ROLE_LABELS,
    UNLABELLED_ROLES,
    PLATFORM_ROLES,
    ORGANIZATION_ROLES,
    EXTERNAL_ROLES,
    _invert_labels,
    normalize,
    resolve_role,
    is_recognized_role,
    is_platform_role,
    is_organization_role,
    is_platform_identity,
    role_tier,
    label_for,
)


class TestNormalize:
    """Test normalize()."""

    @pytest.mark.parametrize("role", list(CanonicalRole))
    def test_canonical_codes_pass_through(self, role):
        assert normalize(role.value) is role
        assert normalize(role) is role

    @pytest.mark.parametrize("label,expected", [
        ("Propietario", CanonicalRole.OWNER),
        ("Administrador", CanonicalRole.ADMIN),
        ("Personal", CanonicalRole.STAFF),
        ("Conductor", CanonicalRole.DRIVER),
        ("Transportista", CanonicalRole.CARRIER),
        ("Desarrollador", CanonicalRole.DEV),
    ])
    def test_legacy_labels(self, label, expected):
        assert normalize(label) is expected

    def test_unrecognized_falls_back_to_driver(self, unknown_inputs):
        """The fallback is the lowest-privilege organization role, never an error."""
        assert DEFAULT_ROLE is CanonicalRole.DRIVER
        for value in unknown_inputs:
            assert normalize(value) is CanonicalRole.DRIVER
        assert label_for("superuser") == "Conductor"

    def test_matching_is_exact(self):
        assert normalize("owner") is DEFAULT_ROLE
        assert normalize("personal") is DEFAULT_ROLE
        assert normalize(" OWNER") is DEFAULT_ROLE


class TestResolveRole:
    """Test strict resolution used by the evaluator."""

    def test_resolves_codes_and_labels(self):
        assert resolve_role("ADMIN") is CanonicalRole.ADMIN
        assert resolve_role("Administrador") is CanonicalRole.ADMIN

    def test_unknown_is_none(self, unknown_inputs):
        for value in unknown_inputs:
            assert resolve_role(value) is None
            assert not is_recognized_role(value)


class TestLabelTable:
    """The legacy label table is a checked bijection."""

    def test_every_labelled_role_has_exactly_one_label(self):
        assert set(ROLE_LABELS) == set(CanonicalRole) - UNLABELLED_ROLES
        assert len(LEGACY_ROLE_LABELS) == len(ROLE_LABELS)

    def test_round_trip(self):
        for label, role in LEGACY_ROLE_LABELS.items():
            assert ROLE_LABELS[role] == label

    def test_labels_do_not_shadow_codes(self):
        codes = {role.value for role in CanonicalRole}
        assert not codes & set(LEGACY_ROLE_LABELS)

    def test_duplicate_label_rejected(self):
        labels = dict(LEGACY_ROLE_LABELS)
        labels["Jefe"] = CanonicalRole.OWNER
        with pytest.raises(PolicyConfigurationError):
            _invert_labels(labels)

    def test_incomplete_table_rejected(self):
        labels = dict(LEGACY_ROLE_LABELS)
        del labels["Conductor"]
        with pytest.raises(PolicyConfigurationError, match="DRIVER"):
            _invert_labels(labels)

    def test_label_shadowing_code_rejected(self):
        labels = dict(LEGACY_ROLE_LABELS)
        labels["ADMIN"] = CanonicalRole.ADMIN
        with pytest.raises(PolicyConfigurationError):
            _invert_labels(labels)

    def test_label_for(self):
        assert label_for(CanonicalRole.STAFF) == "Personal"
        assert label_for("Transportista") == "Transportista"
        assert label_for(CanonicalRole.PLATFORM_ADMIN) == "PLATFORM_ADMIN"


class TestTiers:
    """Test tier membership predicates."""

    def test_tier_sets_are_disjoint_and_cover_all_roles(self):
        assert not PLATFORM_ROLES & ORGANIZATION_ROLES
        assert not PLATFORM_ROLES & EXTERNAL_ROLES
        assert not ORGANIZATION_ROLES & EXTERNAL_ROLES
        assert PLATFORM_ROLES | ORGANIZATION_ROLES | EXTERNAL_ROLES == set(CanonicalRole)
        assert len(PLATFORM_ROLES) == 2
        assert len(ORGANIZATION_ROLES) == 4

    def test_platform_roles(self):
        assert is_platform_role("DEV")
        assert is_platform_role("PLATFORM_ADMIN")
        assert is_platform_role("Desarrollador")
        assert not is_platform_role("OWNER")
        assert not is_platform_role("CARRIER")

    def test_organization_roles(self):
        for role in ("OWNER", "ADMIN", "STAFF", "DRIVER", "Personal"):
            assert is_organization_role(role)
        assert not is_organization_role("DEV")

    def test_carrier_is_external_only(self):
        assert not is_platform_role(CanonicalRole.CARRIER)
        assert not is_organization_role(CanonicalRole.CARRIER)
        assert role_tier(CanonicalRole.CARRIER) is RoleTier.EXTERNAL

    def test_unknown_belongs_to_no_tier(self):
        assert role_tier("superuser") is None
        assert not is_platform_role("superuser")
        assert not is_organization_role("superuser")
        assert not is_organization_role(None)


class TestPlatformIdentity:
    """Test deriving the platform flag from a membership record."""

    def test_active_platform_role(self):
        assert is_platform_identity("PLATFORM_ADMIN", True)
        assert is_platform_identity("DEV", True)

    def test_inactive_record(self):
        assert not is_platform_identity("DEV", False)

    def test_non_platform_role(self):
        assert not is_platform_identity("OWNER", True)
        assert not is_platform_identity(None, True)
