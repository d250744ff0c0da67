"""
Package model: name validation, dependency descriptors, loaded packages.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import InvalidNameError, RegistryError
from .version import Version, VersionConstraint

logger = logging.getLogger("modkit.registry.package")

MAX_NAME_LENGTH = 64

_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_\-][A-Za-z0-9_.\-]*$")


def validate_name(name: Any) -> bool:
    """
    Check a package name.

    Names are non-empty strings of at most 64 characters drawn from
    letters, digits, '_', '-' and '.', not starting with '.'.
    """
    if not isinstance(name, str):
        return False
    if not name or len(name) > MAX_NAME_LENGTH:
        return False
    return _NAME_PATTERN.match(name) is not None


def require_name(name: Any) -> str:
    """Return `name` or raise InvalidNameError."""
    if not validate_name(name):
        raise InvalidNameError(name)
    return name


@dataclass(frozen=True)
class DependencyDescriptor:
    """Named, version-constrained requirement on another package."""

    name: str
    version_constraint: VersionConstraint = field(default_factory=VersionConstraint)

    def __post_init__(self):
        require_name(self.name)

    @classmethod
    def create(cls, name: Any, constraint: Any = None) -> "DependencyDescriptor":
        return cls(name=require_name(name), version_constraint=VersionConstraint.parse(constraint))

    def is_satisfied_by(self, version: Version) -> bool:
        return self.version_constraint.is_satisfied_by(version)

    def __str__(self) -> str:
        return f"{self.name}: {self.version_constraint}"


class Package:
    """
    A loaded content package.

    Owns its assets exclusively; `dispose()` releases them. Validity is
    decided by the dependency resolver, and a package that fails validation
    stays loaded so its problems can be inspected.
    """

    def __init__(
        self,
        name: str,
        version: Version,
        root_path: Path,
        *,
        dependencies: Optional[List[DependencyDescriptor]] = None,
        asset_files: Optional[List[str]] = None,
        source: Optional[str] = None,
    ):
        self.name = require_name(name)
        self.version = version
        self.root_path = Path(root_path)
        self.dependencies: List[DependencyDescriptor] = list(dependencies or [])
        self.asset_files: List[str] = list(asset_files or [])
        self.source = source or str(self.root_path)

        self.assets: Dict[int, Any] = {}
        self.valid = True
        self.problems: List[RegistryError] = []
        self.unresolved: List[DependencyDescriptor] = []
        self.load_order: Optional[int] = None

    @property
    def dependency_count(self) -> int:
        return len(self.dependencies)

    @property
    def asset_count(self) -> int:
        return len(self.assets)

    def invalidate(self, error: RegistryError) -> None:
        """Mark the package invalid and record why."""
        self.valid = False
        self.problems.append(error)
        self.load_order = None

    def reset_validation(self) -> None:
        self.valid = True
        self.problems.clear()
        self.unresolved.clear()
        self.load_order = None

    def add_asset(self, asset: Any) -> None:
        self.assets[asset.guid] = asset

    def dispose(self) -> None:
        """Dispose every owned asset."""
        for asset in self.assets.values():
            asset.dispose()
        self.assets.clear()
        logger.debug("Disposed package `%s`", self.name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": str(self.version),
            "valid": self.valid,
            "load_order": self.load_order,
            "dependencies": [str(d) for d in self.dependencies],
            "unresolved": [str(d) for d in self.unresolved],
            "problems": [
                {"type": p.__class__.__name__, "message": p.message}
                for p in self.problems
            ],
            "asset_files": list(self.asset_files),
            "asset_count": self.asset_count,
        }

    def __repr__(self) -> str:
        state = "valid" if self.valid else "invalid"
        return f"Package({self.name} v{self.version}, {state})"
