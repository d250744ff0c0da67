"""
Package manifest loader.

Reads the manifest of one package directory (YAML or JSON) and builds a
`Package` from it. Nothing in a package directory is executed.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import yaml

from .errors import (
    ErrorSpan,
    InvalidNameError,
    InvalidVersionError,
    ManifestValidationError,
)
from .package import DependencyDescriptor, Package, validate_name
from .version import Version, VersionConstraint

logger = logging.getLogger("modkit.registry.manifest")

_FLOAT_TAG = "tag:yaml.org,2002:float"


class _ManifestYamlLoader(yaml.SafeLoader):
    """SafeLoader that keeps float-looking scalars as text, so `1.10` stays `1.10`."""


_ManifestYamlLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _FLOAT_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}

DEFAULT_MANIFEST_NAMES: Tuple[str, ...] = (
    "package.yaml",
    "package.yml",
    "package.json",
    "manifest.yaml",
    "manifest.yml",
    "manifest.json",
)


class ManifestLoader:
    """
    Builds packages from package directories.

    Args:
        manifest_names: File names probed in order; first match wins
        asset_priorities: Extension -> priority used to order asset files
            when a manifest does not list them explicitly. Files whose
            extension is not in the mapping are not assets.
    """

    def __init__(
        self,
        manifest_names: Sequence[str] = DEFAULT_MANIFEST_NAMES,
        asset_priorities: Optional[Mapping[str, int]] = None,
    ):
        self.manifest_names = tuple(manifest_names)
        self.asset_priorities = dict(asset_priorities or {})

    def find_manifest(self, directory: Path) -> Optional[Path]:
        for name in self.manifest_names:
            candidate = directory / name
            if candidate.is_file():
                return candidate
        return None

    def load(self, directory: Path) -> Package:
        """
        Load the package in `directory`.

        Raises:
            InvalidNameError: If the directory name is not a package name
            ManifestValidationError: If the manifest is missing or invalid
        """
        directory = Path(directory)
        if not directory.is_dir():
            raise ManifestValidationError(
                directory.name,
                [f"Not a directory: {directory}"],
                span=ErrorSpan(file=str(directory)),
            )

        dir_name = directory.name
        if not validate_name(dir_name):
            raise InvalidNameError(dir_name, span=ErrorSpan(file=str(directory)))

        manifest_path = self.find_manifest(directory)
        if manifest_path is None:
            raise ManifestValidationError(
                dir_name,
                [f"No manifest found (expected one of: {', '.join(self.manifest_names)})"],
                span=ErrorSpan(file=str(directory)),
            )

        data = self._read(manifest_path, dir_name)
        package = self._build_package(data, directory, manifest_path)
        logger.debug(
            "Loaded manifest `%s`: %d dependencies, %d asset files",
            manifest_path, package.dependency_count, len(package.asset_files),
        )
        return package

    def _read(self, path: Path, package_name: str) -> Dict[str, Any]:
        span = ErrorSpan(file=str(path))
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ManifestValidationError(
                package_name, [f"Cannot read manifest: {exc}"], span=span,
            ) from exc
        except UnicodeDecodeError as exc:
            raise ManifestValidationError(
                package_name, [f"Manifest is not valid UTF-8: {exc}"], span=span,
            ) from exc

        try:
            if path.suffix == ".json":
                data = json.loads(text, parse_float=str) if text.strip() else None
            else:
                data = yaml.load(text, Loader=_ManifestYamlLoader)
        except (json.JSONDecodeError, yaml.YAMLError) as exc:
            raise ManifestValidationError(
                package_name, [f"Malformed manifest: {exc}"], span=span,
            ) from exc

        if not isinstance(data, dict):
            raise ManifestValidationError(
                package_name, ["Manifest must be a mapping"], span=span,
            )
        return data

    def _build_package(
        self,
        data: Dict[str, Any],
        directory: Path,
        manifest_path: Path,
    ) -> Package:
        dir_name = directory.name
        errors: List[str] = []

        name = data.get("name", dir_name)
        if name != dir_name:
            errors.append(
                f"Manifest name {name!r} does not match directory name {dir_name!r}"
            )

        version: Optional[Version] = None
        if "version" not in data or data["version"] in (None, ""):
            errors.append("Missing required field: version")
        else:
            try:
                version = Version.parse(data["version"])
            except InvalidVersionError:
                errors.append(f"Invalid version format: {data['version']!r}")

        dependencies = self._parse_dependencies(data.get("dependencies"), errors)

        declared_assets = data.get("assets")
        asset_files: List[str] = []
        if declared_assets is None:
            asset_files = self.scan_assets(directory)
        elif not isinstance(declared_assets, list):
            errors.append("Field 'assets' must be a list")
        else:
            for i, entry in enumerate(declared_assets):
                if not isinstance(entry, str) or not entry.strip():
                    errors.append(f"assets[{i}] must be a relative file path")
                    continue
                relative = entry.strip().replace("\\", "/")
                if any(ord(ch) < 32 or ch == "\x7f" for ch in relative):
                    errors.append(f"assets[{i}] contains control characters: {entry!r}")
                    continue
                if relative.startswith("/") or ".." in relative.split("/"):
                    errors.append(f"assets[{i}] escapes the package directory: {entry!r}")
                    continue
                asset_files.append(relative)

        if errors:
            raise ManifestValidationError(
                dir_name, errors, span=ErrorSpan(file=str(manifest_path)),
            )

        return Package(
            name=dir_name,
            version=version,
            root_path=directory,
            dependencies=dependencies,
            asset_files=asset_files,
            source=str(manifest_path),
        )

    def _parse_dependencies(self, raw: Any, errors: List[str]) -> List[DependencyDescriptor]:
        """
        Accepts a mapping `{name: constraint}`, or a list whose entries are
        names or `{name, version}` mappings. Declaration order is kept.
        """
        if raw is None:
            return []

        entries: List[Tuple[Any, Any]] = []
        if isinstance(raw, dict):
            entries = list(raw.items())
        elif isinstance(raw, list):
            for i, entry in enumerate(raw):
                if isinstance(entry, str):
                    entries.append((entry, None))
                elif isinstance(entry, dict) and "name" in entry:
                    entries.append((entry["name"], entry.get("version")))
                else:
                    errors.append(f"dependencies[{i}] must be a name or a {{name, version}} mapping")
        else:
            errors.append("Field 'dependencies' must be a list or mapping")
            return []

        dependencies: List[DependencyDescriptor] = []
        for name, constraint in entries:
            try:
                dependencies.append(
                    DependencyDescriptor(name, VersionConstraint.parse(constraint))
                )
            except InvalidNameError:
                errors.append(f"Invalid dependency name: {name!r}")
            except InvalidVersionError:
                errors.append(f"Invalid version constraint for '{name}': {constraint!r}")
        return dependencies

    def scan_assets(self, directory: Path) -> List[str]:
        """
        List asset files under `directory`, ordered by extension priority
        then by relative path.
        """
        found: List[Tuple[int, str]] = []
        for path in directory.rglob("*"):
            if not path.is_file():
                continue
            priority = self.asset_priorities.get(path.suffix.lower())
            if priority is None:
                continue
            relative = path.relative_to(directory).as_posix()
            if any(part.startswith(".") for part in relative.split("/")):
                continue
            found.append((priority, relative))
        found.sort()
        return [relative for _, relative in found]
