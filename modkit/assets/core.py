"""
Asset variants.

Assets form a closed set of variants tagged by `AssetType`. Every asset
carries a 64-bit GUID, its source file, and a logical path
("<package>/<relative file>") used as its registry key.
"""

from __future__ import annotations

import hashlib
import io
import struct
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from PIL import Image, UnidentifiedImageError

Colour = Tuple[float, float, float]

GUID_BITS = 64
GUID_MASK = (1 << GUID_BITS) - 1


def file_guid(logical_path: str) -> int:
    """Base GUID of a source file, derived from its logical path."""
    digest = hashlib.blake2b(logical_path.encode("utf-8"), digest_size=8).digest()
    return int.from_bytes(digest, "big")


def derive_guid(base: int, ordinal: int) -> int:
    """
    GUID of the `ordinal`-th asset defined inside the file whose GUID is
    `base`. Pure function of its arguments.
    """
    payload = struct.pack(">QQ", base & GUID_MASK, ordinal & GUID_MASK)
    digest = hashlib.blake2b(payload, digest_size=8, person=b"modkit.sub").digest()
    return int.from_bytes(digest, "big")


def clamp01(value: float) -> float:
    if value < 0.0:
        return 0.0
    if value > 1.0:
        return 1.0
    return value


class AssetType(str, Enum):
    """Asset variant tag."""
    TEXTURE = "texture"
    MATERIAL = "material"
    MATERIAL_COLLECTION = "material_collection"
    MESH = "mesh"


class IlluminationModel(IntEnum):
    """MTL `illum` values."""
    COLOUR_ONLY = 0
    FLAT = 1         # no specular highlights, ks unused
    SPECULAR = 2     # specular highlights, ks used


@dataclass(eq=False)
class Asset:
    """Fields common to every asset variant."""

    guid: int
    source_path: Path
    path: str
    package: str
    type: AssetType = field(init=False)

    @property
    def is_valid(self) -> bool:
        return False

    def dispose(self) -> None:
        """Release backing data."""

    def describe(self) -> Dict[str, object]:
        return {"guid": f"{self.guid:016x}", "type": self.type.value, "path": self.path}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.path}, guid={self.guid:016x})"


@dataclass(eq=False, repr=False)
class Texture(Asset):
    """Raw image file; the host decodes `data` into an engine texture."""

    data: Optional[bytes] = None
    width: Optional[int] = None
    height: Optional[int] = None

    def __post_init__(self):
        self.type = AssetType.TEXTURE

    @property
    def is_valid(self) -> bool:
        return self.data is not None

    def load(self, data: bytes) -> None:
        self.data = data
        self.width, self.height = read_image_size(data)

    def dispose(self) -> None:
        self.data = None
        self.width = None
        self.height = None

    def describe(self) -> Dict[str, object]:
        info = super().describe()
        info.update(size=len(self.data) if self.data is not None else None,
                    width=self.width, height=self.height)
        return info


@dataclass(eq=False, repr=False)
class Material(Asset):
    """One `newmtl` block of an MTL file."""

    name: str = ""
    ambient_colour: Colour = (0.2, 0.2, 0.2)
    base_colour: Colour = (0.8, 0.8, 0.8)
    specular_colour: Colour = (1.0, 1.0, 1.0)
    alpha: float = 1.0
    shininess: float = 0.0
    illumination_model: Union[IlluminationModel, int] = IlluminationModel.FLAT
    base_map: Optional[Texture] = None
    collection: Optional["MaterialCollection"] = None
    finalised: bool = False

    def __post_init__(self):
        self.type = AssetType.MATERIAL

    @property
    def is_valid(self) -> bool:
        return self.finalised

    def dispose(self) -> None:
        self.base_map = None
        self.finalised = False

    def describe(self) -> Dict[str, object]:
        info = super().describe()
        info.update(
            name=self.name,
            ambient=list(self.ambient_colour),
            base=list(self.base_colour),
            specular=list(self.specular_colour),
            alpha=self.alpha,
            shininess=self.shininess,
            illum=int(self.illumination_model),
            base_map=self.base_map.path if self.base_map is not None else None,
        )
        return info


@dataclass(eq=False, repr=False)
class MaterialCollection(Asset):
    """An MTL file; owns the materials it defines, in file order."""

    materials: List[Material] = field(default_factory=list)
    loaded: bool = False

    def __post_init__(self):
        self.type = AssetType.MATERIAL_COLLECTION

    @property
    def is_valid(self) -> bool:
        return self.loaded

    def get(self, name: str) -> Optional[Material]:
        for material in self.materials:
            if material.name == name:
                return material
        return None

    def dispose(self) -> None:
        for material in self.materials:
            material.dispose()
        self.materials = []
        self.loaded = False

    def describe(self) -> Dict[str, object]:
        info = super().describe()
        info["materials"] = [m.name for m in self.materials]
        return info


@dataclass
class FaceGroup:
    """
    Triangles sharing one material.

    `triangles` index `Mesh.vertices`. `uv_triangles` and `normal_triangles`
    run parallel to it with the matching `Mesh.uvs` and `Mesh.normals`
    indices, or None for a triangle where any corner leaves them out.
    """

    material_name: Optional[str]
    material: Optional[Material] = None
    triangles: List[Tuple[int, int, int]] = field(default_factory=list)
    uv_triangles: List[Optional[Tuple[int, int, int]]] = field(default_factory=list)
    normal_triangles: List[Optional[Tuple[int, int, int]]] = field(default_factory=list)


@dataclass(eq=False, repr=False)
class Mesh(Asset):
    """Polygon mesh from an OBJ file, triangulated."""

    vertices: List[Tuple[float, float, float]] = field(default_factory=list)
    normals: List[Tuple[float, float, float]] = field(default_factory=list)
    uvs: List[Tuple[float, float]] = field(default_factory=list)
    groups: List[FaceGroup] = field(default_factory=list)
    material_library: Optional[MaterialCollection] = None
    loaded: bool = False

    def __post_init__(self):
        self.type = AssetType.MESH

    @property
    def is_valid(self) -> bool:
        return self.loaded

    @property
    def triangle_count(self) -> int:
        return sum(len(g.triangles) for g in self.groups)

    def dispose(self) -> None:
        self.vertices = []
        self.normals = []
        self.uvs = []
        self.groups = []
        self.material_library = None
        self.loaded = False

    def describe(self) -> Dict[str, object]:
        info = super().describe()
        info.update(
            vertices=len(self.vertices),
            triangles=self.triangle_count,
            materials=[g.material_name for g in self.groups],
        )
        return info


def read_image_size(data: bytes) -> Tuple[Optional[int], Optional[int]]:
    """
    Width and height of an encoded image, or (None, None) when Pillow cannot
    identify it. Only the header is decoded.
    """
    try:
        with Image.open(io.BytesIO(data)) as image:
            return image.size
    except (UnidentifiedImageError, OSError):
        return None, None
