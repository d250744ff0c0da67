"""
modkit - runtime loader for third-party content packages

- Registry: manifest-driven packages with versioned dependencies
- Resolver: dependency validation and deterministic processing order
- Assets: GUID-keyed asset registry with cross-package lookups
- Importer: per-package import with failures isolated to one package or file
"""

__version__ = "0.3.0"

# ============================================================================
# Registry
# ============================================================================

from .registry import (
    PackageRegistry,
    Package,
    DependencyDescriptor,
    DependencyResolver,
    DependencyGraph,
    ManifestLoader,
    Version,
    VersionConstraint,
    validate_name,
)

# ============================================================================
# Errors
# ============================================================================

from .registry.errors import (
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

# ============================================================================
# Assets
# ============================================================================

from .assets import (
    Asset,
    AssetType,
    AssetRegistry,
    Texture,
    Material,
    MaterialCollection,
    Mesh,
    IlluminationModel,
    MtlParser,
    ObjParser,
    derive_guid,
    file_guid,
)

# ============================================================================
# Import session
# ============================================================================

from .config import ModkitConfig, ConfigLoader, ConfigError
from .fingerprint import FingerprintGenerator
from .importer import PackageImporter, ImportReport

__all__ = [
    "__version__",
    # Registry
    "PackageRegistry",
    "Package",
    "DependencyDescriptor",
    "DependencyResolver",
    "DependencyGraph",
    "ManifestLoader",
    "Version",
    "VersionConstraint",
    "validate_name",
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
    # Assets
    "Asset",
    "AssetType",
    "AssetRegistry",
    "Texture",
    "Material",
    "MaterialCollection",
    "Mesh",
    "IlluminationModel",
    "MtlParser",
    "ObjParser",
    "derive_guid",
    "file_guid",
    # Session
    "ModkitConfig",
    "ConfigLoader",
    "ConfigError",
    "FingerprintGenerator",
    "PackageImporter",
    "ImportReport",
]
