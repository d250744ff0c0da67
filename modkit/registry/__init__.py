"""
Package registry for modkit.

- Builds packages from manifests without executing package content
- Validates declared dependencies and version constraints
- Computes a deterministic, dependency-first processing order
- Isolates failures: invalid packages stay loaded for inspection
"""

from .core import PackageRegistry, PackageView

from .errors import (
    RegistryError,
    ErrorSpan,
    InvalidNameError,
    InvalidVersionError,
    ManifestValidationError,
    DuplicateNameError,
    UnresolvedDependencyError,
    CyclicDependencyError,
    NoActiveAssetError,
    FormatError,
    AssetIOError,
    DuplicateGuidError,
    ValidationReport,
)

from .graph import DependencyGraph

from .manifest import ManifestLoader, DEFAULT_MANIFEST_NAMES

from .package import (
    Package,
    DependencyDescriptor,
    validate_name,
    require_name,
)

from .resolver import DependencyResolver

from .version import Version, VersionConstraint, ConstraintOperator

__all__ = [
    # Core
    "PackageRegistry",
    "PackageView",
    "Package",
    "DependencyDescriptor",
    "validate_name",
    "require_name",

    # Errors
    "RegistryError",
    "ErrorSpan",
    "InvalidNameError",
    "InvalidVersionError",
    "ManifestValidationError",
    "DuplicateNameError",
    "UnresolvedDependencyError",
    "CyclicDependencyError",
    "NoActiveAssetError",
    "FormatError",
    "AssetIOError",
    "DuplicateGuidError",
    "ValidationReport",

    # Resolution
    "DependencyGraph",
    "DependencyResolver",
    "ManifestLoader",
    "DEFAULT_MANIFEST_NAMES",

    # Versions
    "Version",
    "VersionConstraint",
    "ConstraintOperator",
]
