"""
Wavefront OBJ mesh parser.

Reads positions, texture coordinates, normals and faces; polygons are
fan-triangulated. `mtllib` and `usemtl` are resolved through the asset
registry and left unset when the library or material is not imported.
"""

import logging
from typing import List, Optional, Tuple

from ..registry.errors import ErrorSpan, FormatError
from .core import AssetType, FaceGroup, MaterialCollection, Mesh
from .mtl import parse_float, parse_int, split_lines
from .registry import AssetRegistry, resolve_relative

logger = logging.getLogger("modkit.assets.obj")

# (position, texture coordinate, normal) indices of one face corner
Corner = Tuple[int, Optional[int], Optional[int]]


class ObjParser:
    """Fills a `Mesh` from OBJ text."""

    def __init__(self, assets: AssetRegistry, mesh: Mesh):
        self.assets = assets
        self.mesh = mesh
        self._line = 0
        self._group: Optional[FaceGroup] = None

    def parse(self, text: str) -> Mesh:
        """
        Raises:
            FormatError: On malformed numbers or face indices
        """
        mesh = self.mesh
        self._group = None

        for number, raw in enumerate(split_lines(text), 1):
            self._line = number
            tokens = raw.split()
            if len(tokens) < 2:
                continue
            command = tokens[0].lower()

            if command == "v":
                mesh.vertices.append(self._vector(tokens, 3))
            elif command == "vn":
                mesh.normals.append(self._vector(tokens, 3))
            elif command == "vt":
                mesh.uvs.append(self._vector(tokens, 2))
            elif command == "f":
                self._face(tokens)
            elif command == "mtllib":
                library_path = resolve_relative(mesh.path, tokens[1])
                library = self.assets.find(library_path, AssetType.MATERIAL_COLLECTION)
                if library is None:
                    logger.debug("Material library `%s` not found for `%s`", library_path, mesh.path)
                mesh.material_library = library
            elif command == "usemtl":
                self._group = self._start_group(tokens[1])

        mesh.groups = [g for g in mesh.groups if g.triangles]
        return mesh

    def _span(self) -> ErrorSpan:
        return ErrorSpan(file=str(self.mesh.source_path), line=self._line)

    def _vector(self, tokens: List[str], size: int) -> Tuple[float, ...]:
        if len(tokens) < size + 1:
            raise FormatError(
                f"{size} components required, got {len(tokens) - 1}",
                line=self._line,
                span=self._span(),
            )
        return tuple(parse_float(t, self._line, self._span()) for t in tokens[1:size + 1])

    def _start_group(self, material_name: Optional[str]) -> FaceGroup:
        library: Optional[MaterialCollection] = self.mesh.material_library
        material = library.get(material_name) if library is not None and material_name else None
        group = FaceGroup(material_name=material_name, material=material)
        self.mesh.groups.append(group)
        return group

    def _resolve(self, token: str, count: int, kind: str) -> int:
        index = parse_int(token, self._line, self._span())
        resolved = count + index if index < 0 else index - 1
        if index == 0 or not 0 <= resolved < count:
            raise FormatError(
                f"{kind} index {token} out of range", line=self._line, span=self._span(),
            )
        return resolved

    def _corner(self, token: str) -> Corner:
        """`v`, `v/vt`, `v//vn` or `v/vt/vn`, each 1-based or negative."""
        parts = token.split("/")
        if len(parts) > 3:
            raise FormatError(
                f"Malformed face vertex {token!r}", line=self._line, span=self._span(),
            )
        parts += [""] * (3 - len(parts))
        position = self._resolve(parts[0], len(self.mesh.vertices), "Vertex")
        uv = self._resolve(parts[1], len(self.mesh.uvs), "Texture coordinate") if parts[1] else None
        normal = self._resolve(parts[2], len(self.mesh.normals), "Normal") if parts[2] else None
        return position, uv, normal

    def _face(self, tokens: List[str]) -> None:
        if len(tokens) < 4:
            raise FormatError(
                f"A face needs at least 3 vertices, got {len(tokens) - 1}",
                line=self._line,
                span=self._span(),
            )
        corners = [self._corner(t) for t in tokens[1:]]
        if self._group is None:
            self._group = self._start_group(None)
        group = self._group
        for i in range(1, len(corners) - 1):
            triangle = (corners[0], corners[i], corners[i + 1])
            group.triangles.append(tuple(c[0] for c in triangle))
            group.uv_triangles.append(_attribute(triangle, 1))
            group.normal_triangles.append(_attribute(triangle, 2))


def _attribute(triangle: Tuple[Corner, Corner, Corner], slot: int) -> Optional[Tuple[int, int, int]]:
    values = tuple(corner[slot] for corner in triangle)
    return None if None in values else values


def parse_obj(text: str, assets: AssetRegistry, mesh: Mesh) -> Mesh:
    return ObjParser(assets, mesh).parse(text)
