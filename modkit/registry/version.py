"""
Package versions and dependency version constraints.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from .errors import InvalidVersionError


@dataclass(frozen=True, order=True)
class Version:
    """MAJOR.MINOR.PATCH version; missing trailing parts default to 0."""

    major: int = 0
    minor: int = 0
    patch: int = 0

    @classmethod
    def parse(cls, value: Union[str, int, "Version"]) -> "Version":
        """
        Parse a version string.

        Accepts "1", "1.2", "1.2.3" and an optional leading "v". Integers are
        accepted as a major version. Floats are rejected: `1.10` and `1.1`
        are the same float, so the written version is already lost.

        Raises:
            InvalidVersionError: If the value is not a version
        """
        if isinstance(value, Version):
            return value
        if isinstance(value, bool) or value is None:
            raise InvalidVersionError(value)
        if isinstance(value, float):
            raise InvalidVersionError(
                value, suggestion=f"Quote the version so it is read as text: '{value}'.",
            )
        if isinstance(value, int):
            value = str(value)
        if not isinstance(value, str):
            raise InvalidVersionError(value)

        text = value.strip()
        if text[:1] in ("v", "V"):
            text = text[1:]

        parts = text.split(".")
        if not text or len(parts) > 3:
            raise InvalidVersionError(value)

        numbers = []
        for part in parts:
            if not (part.isascii() and part.isdigit()):
                raise InvalidVersionError(value)
            numbers.append(int(part))

        while len(numbers) < 3:
            numbers.append(0)

        return cls(*numbers)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


class ConstraintOperator(str, Enum):
    """How an installed version is compared to a required one."""
    ANY = "*"
    COMPATIBLE = "^"   # same major, >= required
    MINIMUM = ">="
    EXACT = "=="


@dataclass(frozen=True)
class VersionConstraint:
    """Version requirement attached to a dependency."""

    operator: ConstraintOperator = ConstraintOperator.ANY
    version: Version = Version()

    @classmethod
    def parse(cls, value: Any) -> "VersionConstraint":
        """
        Parse a constraint string.

        Bare versions are compatible-release constraints:
            "1.2"    -> ^1.2.0
            ">=1.2"  -> minimum 1.2.0, any major
            "==1.2"  -> exactly 1.2.0 ("=1.2" is accepted too)
            "*", ""  -> any version
        """
        if isinstance(value, VersionConstraint):
            return value
        if value is None:
            return cls()
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return cls(ConstraintOperator.COMPATIBLE, Version.parse(value))
        if not isinstance(value, str):
            raise InvalidVersionError(value)

        text = value.strip()
        if text in ("", "*"):
            return cls()

        for prefix, operator in (
            (">=", ConstraintOperator.MINIMUM),
            ("==", ConstraintOperator.EXACT),
            ("=", ConstraintOperator.EXACT),
            ("^", ConstraintOperator.COMPATIBLE),
        ):
            if text.startswith(prefix):
                return cls(operator, Version.parse(text[len(prefix):].strip()))

        return cls(ConstraintOperator.COMPATIBLE, Version.parse(text))

    def is_satisfied_by(self, version: Version) -> bool:
        """Check an installed version against this constraint."""
        if self.operator is ConstraintOperator.ANY:
            return True
        if self.operator is ConstraintOperator.EXACT:
            return version == self.version
        if self.operator is ConstraintOperator.MINIMUM:
            return version >= self.version
        return version.major == self.version.major and version >= self.version

    def __str__(self) -> str:
        if self.operator is ConstraintOperator.ANY:
            return "*"
        return f"{self.operator.value}{self.version}"
