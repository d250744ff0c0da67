"""
Asset loaders: which variant a file becomes and how it is imported.

Dispatch is on `AssetType`. Each loader reads one file, builds its assets
and returns them without touching the registry; `import_file` registers
the result only once the whole file has loaded.
"""

import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional

from ..registry.errors import AssetIOError
from .core import (
    Asset,
    AssetType,
    MaterialCollection,
    Mesh,
    Texture,
    file_guid,
)
from .mtl import MtlParser
from .obj import ObjParser
from .registry import AssetRegistry, normalise_path

logger = logging.getLogger("modkit.assets.loaders")

EXTENSION_TYPES: Dict[str, AssetType] = {
    ".png": AssetType.TEXTURE,
    ".jpg": AssetType.TEXTURE,
    ".jpeg": AssetType.TEXTURE,
    ".tga": AssetType.TEXTURE,
    ".bmp": AssetType.TEXTURE,
    ".mtl": AssetType.MATERIAL_COLLECTION,
    ".obj": AssetType.MESH,
}

# Textures before the materials that reference them, materials before meshes.
TYPE_PRIORITY: Dict[AssetType, int] = {
    AssetType.TEXTURE: 0,
    AssetType.MATERIAL_COLLECTION: 1,
    AssetType.MESH: 2,
}

EXTENSION_PRIORITY: Dict[str, int] = {
    ext: TYPE_PRIORITY[asset_type] for ext, asset_type in EXTENSION_TYPES.items()
}


def asset_type_for(path: str) -> Optional[AssetType]:
    return EXTENSION_TYPES.get(Path(path).suffix.lower())


def _read_bytes(source: Path) -> bytes:
    try:
        return source.read_bytes()
    except OSError as exc:
        raise AssetIOError(str(source), exc.strerror or str(exc)) from exc
    except ValueError as exc:
        # e.g. an embedded NUL byte in the path
        raise AssetIOError(str(source), str(exc)) from exc


def _read_text(source: Path) -> str:
    data = _read_bytes(source)
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        return data.decode("latin-1")


def load_texture(source: Path, path: str, package: str, assets: AssetRegistry) -> List[Asset]:
    texture = Texture(guid=file_guid(path), source_path=source, path=path, package=package)
    texture.load(_read_bytes(source))
    return [texture]


def load_material_collection(
    source: Path, path: str, package: str, assets: AssetRegistry,
) -> List[Asset]:
    collection = MaterialCollection(
        guid=file_guid(path), source_path=source, path=path, package=package,
    )
    parser = MtlParser(assets, path, collection.guid, package, source_path=source)
    materials = parser.parse(_read_text(source))
    for material in materials:
        material.collection = collection
    collection.materials = materials
    collection.loaded = True
    return [collection, *materials]


def load_mesh(source: Path, path: str, package: str, assets: AssetRegistry) -> List[Asset]:
    mesh = Mesh(guid=file_guid(path), source_path=source, path=path, package=package)
    ObjParser(assets, mesh).parse(_read_text(source))
    mesh.loaded = True
    return [mesh]


LOADERS: Dict[AssetType, Callable[[Path, str, str, AssetRegistry], List[Asset]]] = {
    AssetType.TEXTURE: load_texture,
    AssetType.MATERIAL_COLLECTION: load_material_collection,
    AssetType.MESH: load_mesh,
}


def import_file(package, relative: str, assets: AssetRegistry) -> List[Asset]:
    """
    Import one asset file of `package` into `assets`.

    Args:
        package: Owning `Package`
        relative: File path relative to the package root
        assets: Target registry

    Returns:
        Assets registered for the file, empty if the extension is unknown

    Raises:
        AssetIOError, FormatError, NoActiveAssetError: The file failed; nothing
            from it was registered
        DuplicateGuidError: GUID collision in a strict registry
    """
    asset_type = asset_type_for(relative)
    if asset_type is None:
        logger.debug("Skipping `%s`: unrecognised file type", relative)
        return []

    source = package.root_path / relative
    path = normalise_path(f"{package.name}/{relative}")
    loaded = LOADERS[asset_type](source, path, package.name, assets)

    registered: List[Asset] = []
    for asset in loaded:
        if assets.add(asset):
            package.add_asset(asset)
            registered.append(asset)
    return registered
