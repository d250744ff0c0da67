"""
Shared test fixtures and helpers for the modkit test suite.
"""

import io
import logging
from pathlib import Path
from typing import Dict, Optional, Sequence, Union

import pytest
import yaml
from PIL import Image

from modkit.assets.registry import AssetRegistry
from modkit.registry.core import PackageRegistry
from modkit.registry.package import DependencyDescriptor, Package
from modkit.registry.version import Version, VersionConstraint


# ============================================================================
# On-disk package helpers
# ============================================================================


def image_bytes(fmt: str, size=(4, 2), mode: str = "RGBA") -> bytes:
    """Encode a blank `size` image with Pillow."""
    buffer = io.BytesIO()
    Image.new(mode, size).save(buffer, format=fmt)
    return buffer.getvalue()


PNG_4x2 = image_bytes("PNG")


def write_package(
    root: Path,
    name: str,
    version: str = "1.0.0",
    *,
    dependencies: Optional[Union[Dict[str, str], Sequence]] = None,
    files: Optional[Dict[str, Union[str, bytes]]] = None,
    assets: Optional[Sequence[str]] = None,
    manifest: Optional[dict] = None,
) -> Path:
    """Create `<root>/<name>/package.yaml` plus the given files."""
    directory = root / name
    directory.mkdir(parents=True, exist_ok=True)

    if manifest is None:
        manifest = {"name": name, "version": version}
        if dependencies is not None:
            manifest["dependencies"] = dependencies
        if assets is not None:
            manifest["assets"] = list(assets)
    (directory / "package.yaml").write_text(yaml.safe_dump(manifest))

    for relative, content in (files or {}).items():
        path = directory / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content)
    return directory


def make_package(
    name: str,
    version: str = "1.0.0",
    dependencies: Optional[Dict[str, Optional[str]]] = None,
    root: Optional[Path] = None,
) -> Package:
    """In-memory package with `{name: constraint}` dependencies."""
    deps = [
        DependencyDescriptor(dep, VersionConstraint.parse(constraint))
        for dep, constraint in (dependencies or {}).items()
    ]
    return Package(
        name=name,
        version=Version.parse(version),
        root_path=root or Path("/packages") / name,
        dependencies=deps,
    )


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def reset_modkit_logger():
    """CLI commands adjust the `modkit` logger level; restore it per test."""
    logger = logging.getLogger("modkit")
    level = logger.level
    yield
    logger.setLevel(level)


@pytest.fixture
def packages_root(tmp_path):
    root = tmp_path / "mods"
    root.mkdir()
    return root


@pytest.fixture
def registry():
    return PackageRegistry()


@pytest.fixture
def assets():
    return AssetRegistry()
