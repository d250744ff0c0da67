"""
Assets: typed content imported from package files.
"""

from .core import (
    Asset,
    AssetType,
    Texture,
    Material,
    MaterialCollection,
    Mesh,
    FaceGroup,
    IlluminationModel,
    file_guid,
    derive_guid,
    clamp01,
)

from .registry import AssetRegistry, normalise_path, resolve_relative

from .mtl import MtlParser, parse_mtl

from .obj import ObjParser, parse_obj

from .loaders import (
    EXTENSION_TYPES,
    EXTENSION_PRIORITY,
    asset_type_for,
    import_file,
)

__all__ = [
    "Asset",
    "AssetType",
    "Texture",
    "Material",
    "MaterialCollection",
    "Mesh",
    "FaceGroup",
    "IlluminationModel",
    "file_guid",
    "derive_guid",
    "clamp01",
    "AssetRegistry",
    "normalise_path",
    "resolve_relative",
    "MtlParser",
    "parse_mtl",
    "ObjParser",
    "parse_obj",
    "EXTENSION_TYPES",
    "EXTENSION_PRIORITY",
    "asset_type_for",
    "import_file",
]
