"""
MTL material library parser.

Line-oriented, whitespace-delimited format with a single "current material"
slot. Reference:
    https://people.sc.fsu.edu/~jburkardt/data/mtl/mtl.html

Supported commands (case-insensitive):
    newmtl <name>       start a new material
    Ka/Kd/Ks r g b      ambient/base/specular colour, clamped to [0, 1]
    a <alpha>           opacity
    Tr <t>              transparency, opacity = 1 - t
    Ns <s>              shininess, clamped to [0, 1]
    illum <i>           illumination model
    map_Ka <file>       texture, resolved against the file's directory
"""

import logging
import re
from pathlib import Path
from typing import Callable, Dict, List, Optional

from ..registry.errors import ErrorSpan, FormatError, NoActiveAssetError
from .core import (
    AssetType,
    IlluminationModel,
    Material,
    clamp01,
    derive_guid,
)
from .registry import AssetRegistry, resolve_relative

logger = logging.getLogger("modkit.assets.mtl")

_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_FLOAT = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")
_INT = re.compile(r"^[+-]?\d+$")


def split_lines(text: str) -> List[str]:
    """Split on CR, LF or CRLF."""
    return _LINE_BREAK.split(text)


def parse_float(token: str, line: int, span: Optional[ErrorSpan] = None) -> float:
    if not _FLOAT.match(token):
        raise FormatError(f"Expected a number, got {token!r}", line=line, span=span)
    return float(token)


def parse_int(token: str, line: int, span: Optional[ErrorSpan] = None) -> int:
    if not _INT.match(token):
        raise FormatError(f"Expected an integer, got {token!r}", line=line, span=span)
    return int(token)


class MtlParser:
    """
    Parses one MTL file into materials.

    Materials are collected in file order; nothing is written to the asset
    registry, which is only read to resolve `map_Ka` textures. The caller
    registers the materials once the whole file has parsed.

    Args:
        assets: Registry used for texture lookups
        path: Logical path of the file, e.g. "base/materials/wood.mtl"
        base_guid: GUID of the file's material collection
        package: Owning package name
        source_path: File on disk, used in error spans
    """

    def __init__(
        self,
        assets: AssetRegistry,
        path: str,
        base_guid: int,
        package: str,
        source_path: Optional[Path] = None,
    ):
        self.assets = assets
        self.path = path
        self.base_guid = base_guid
        self.package = package
        self.source_path = source_path if source_path is not None else Path(path)

        self._current: Optional[Material] = None
        self._materials: List[Material] = []
        self._ordinal = 0
        self._line = 0

        self._commands: Dict[str, Callable[[List[str]], None]] = {
            "newmtl": self._newmtl,
            "ka": self._ambient,
            "kd": self._diffuse,
            "ks": self._specular,
            "a": self._alpha,
            "tr": self._transparency,
            "ns": self._shininess,
            "illum": self._illum,
            "map_ka": self._map_ka,
        }

    def parse(self, text: str) -> List[Material]:
        """
        Parse `text`.

        Raises:
            NoActiveAssetError: If a property precedes any `newmtl`
            FormatError: On malformed numbers or colour arity
        """
        self._current = None
        self._materials = []
        self._ordinal = 0

        for number, raw in enumerate(split_lines(text), 1):
            self._line = number
            tokens = raw.split()
            if len(tokens) < 2:
                continue
            handler = self._commands.get(tokens[0].lower())
            if handler is None:
                continue
            handler(tokens)

        self._finalise()
        logger.debug("Parsed %d materials from `%s`", len(self._materials), self.path)
        return self._materials

    def _span(self) -> ErrorSpan:
        return ErrorSpan(file=str(self.source_path), line=self._line)

    def _finalise(self) -> None:
        if self._current is not None:
            self._current.finalised = True
            self._materials.append(self._current)
            self._current = None

    def _require(self, command: str) -> Material:
        if self._current is None:
            raise NoActiveAssetError(command, span=self._span())
        return self._current

    def _colour(self, tokens: List[str]):
        if len(tokens) != 4:
            raise FormatError(
                f"3 arguments required for a colour, got {len(tokens) - 1}",
                line=self._line,
                span=self._span(),
            )
        return tuple(clamp01(parse_float(t, self._line, self._span())) for t in tokens[1:])

    def _newmtl(self, tokens: List[str]) -> None:
        self._finalise()
        name = tokens[1]
        self._current = Material(
            guid=derive_guid(self.base_guid, self._ordinal),
            source_path=self.source_path,
            path=f"{self.path}#{name}",
            package=self.package,
            name=name,
        )
        self._ordinal += 1

    def _ambient(self, tokens: List[str]) -> None:
        material = self._require(tokens[0])
        material.ambient_colour = self._colour(tokens)

    def _diffuse(self, tokens: List[str]) -> None:
        material = self._require(tokens[0])
        material.base_colour = self._colour(tokens)

    def _specular(self, tokens: List[str]) -> None:
        material = self._require(tokens[0])
        material.specular_colour = self._colour(tokens)

    def _alpha(self, tokens: List[str]) -> None:
        material = self._require(tokens[0])
        material.alpha = clamp01(parse_float(tokens[1], self._line, self._span()))

    def _transparency(self, tokens: List[str]) -> None:
        material = self._require(tokens[0])
        material.alpha = clamp01(1.0 - parse_float(tokens[1], self._line, self._span()))

    def _shininess(self, tokens: List[str]) -> None:
        material = self._require(tokens[0])
        material.shininess = clamp01(parse_float(tokens[1], self._line, self._span()))

    def _illum(self, tokens: List[str]) -> None:
        material = self._require(tokens[0])
        value = parse_int(tokens[1], self._line, self._span())
        try:
            material.illumination_model = IlluminationModel(value)
        except ValueError:
            material.illumination_model = value

    def _map_ka(self, tokens: List[str]) -> None:
        material = self._require(tokens[0])
        texture_path = resolve_relative(self.path, tokens[1])
        texture = self.assets.find(texture_path, AssetType.TEXTURE)
        if texture is not None:
            material.base_map = texture
        else:
            logger.debug("Texture `%s` not found for `%s`", texture_path, material.path)


def parse_mtl(
    text: str,
    assets: AssetRegistry,
    path: str,
    base_guid: int,
    package: str = "",
) -> List[Material]:
    """Parse MTL `text`; see `MtlParser`."""
    return MtlParser(assets, path, base_guid, package).parse(text)
