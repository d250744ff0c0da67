"""
Versions and version constraints (registry/version.py).
"""

import pytest

from modkit.registry.errors import InvalidVersionError
from modkit.registry.version import ConstraintOperator, Version, VersionConstraint


# ============================================================================
# Version
# ============================================================================

class TestVersion:

    def test_parse_full(self):
        assert Version.parse("1.2.3") == Version(1, 2, 3)

    def test_parse_pads_missing_parts(self):
        assert Version.parse("2") == Version(2, 0, 0)
        assert Version.parse("2.5") == Version(2, 5, 0)

    def test_parse_leading_v(self):
        assert Version.parse("v1.0.1") == Version(1, 0, 1)

    def test_parse_int_is_major(self):
        assert Version.parse(2) == Version(2, 0, 0)

    def test_parse_rejects_float(self):
        with pytest.raises(InvalidVersionError) as exc_info:
            Version.parse(1.1)
        assert "Quote the version" in exc_info.value.suggestion

    @pytest.mark.parametrize("value", ["", "1.2.3.4", "1.x", "abc", None, True, "-1.0", "1.²"])
    def test_parse_rejects(self, value):
        with pytest.raises(InvalidVersionError):
            Version.parse(value)

    def test_ordering(self):
        assert Version(1, 2, 0) < Version(1, 10, 0)
        assert Version(2, 0, 0) > Version(1, 99, 99)

    def test_str(self):
        assert str(Version(1, 0, 0)) == "1.0.0"


# ============================================================================
# VersionConstraint
# ============================================================================

class TestVersionConstraint:

    def test_any(self):
        constraint = VersionConstraint.parse(None)
        assert constraint.operator is ConstraintOperator.ANY
        assert constraint.is_satisfied_by(Version(0, 0, 1))
        assert VersionConstraint.parse("*").is_satisfied_by(Version(9, 0, 0))

    def test_bare_version_is_compatible(self):
        constraint = VersionConstraint.parse("1.2")
        assert constraint.operator is ConstraintOperator.COMPATIBLE
        assert constraint.is_satisfied_by(Version(1, 2, 0))
        assert constraint.is_satisfied_by(Version(1, 9, 0))
        assert not constraint.is_satisfied_by(Version(1, 1, 9))
        assert not constraint.is_satisfied_by(Version(2, 0, 0))

    def test_minimum(self):
        constraint = VersionConstraint.parse(">=1.2.0")
        assert constraint.is_satisfied_by(Version(3, 0, 0))
        assert not constraint.is_satisfied_by(Version(1, 1, 0))

    def test_exact(self):
        assert VersionConstraint.parse("==1.2.0").is_satisfied_by(Version(1, 2, 0))
        assert not VersionConstraint.parse("=1.2.0").is_satisfied_by(Version(1, 2, 1))

    def test_str_round_trip(self):
        assert str(VersionConstraint.parse(">= 1.2")) == ">=1.2.0"
        assert str(VersionConstraint.parse(None)) == "*"

    def test_invalid(self):
        with pytest.raises(InvalidVersionError):
            VersionConstraint.parse(">=one")

    def test_float_constraint_rejected(self):
        with pytest.raises(InvalidVersionError):
            VersionConstraint.parse(1.1)
