"""
MTL material library parser (assets/mtl.py).
"""

from pathlib import Path

import pytest

from modkit.assets.core import IlluminationModel, Texture, derive_guid, file_guid
from modkit.assets.mtl import MtlParser, parse_mtl, split_lines
from modkit.registry.errors import FormatError, NoActiveAssetError

PATH = "base/materials/wood.mtl"
BASE = file_guid(PATH)


def _parse(text, assets):
    return parse_mtl(text, assets, PATH, BASE, package="base")


def _add_texture(assets, path):
    texture = Texture(guid=file_guid(path), source_path=Path(path), path=path, package="base")
    texture.load(b"data")
    assets.add(texture)
    return texture


# ============================================================================
# Basic materials
# ============================================================================

class TestMaterials:

    def test_single_material(self, assets):
        materials = _parse("newmtl X\nKd 1.0 0.5 0.25\n", assets)

        assert len(materials) == 1
        material = materials[0]
        assert material.name == "X"
        assert material.guid == derive_guid(BASE, 0)
        assert material.base_colour == (1.0, 0.5, 0.25)
        assert material.alpha == 1.0
        assert material.path == "base/materials/wood.mtl#X"
        assert material.package == "base"
        assert material.is_valid

    def test_multiple_materials_get_ordinal_guids(self, assets):
        materials = _parse("newmtl A\nnewmtl B\nnewmtl C\n", assets)
        assert [m.name for m in materials] == ["A", "B", "C"]
        assert [m.guid for m in materials] == [derive_guid(BASE, i) for i in range(3)]

    def test_last_material_finalised_at_end(self, assets):
        materials = _parse("newmtl A\nKs 0 0 0", assets)
        assert materials[0].specular_colour == (0.0, 0.0, 0.0)
        assert materials[0].finalised

    def test_empty_input(self, assets):
        assert _parse("", assets) == []

    def test_parse_does_not_register(self, assets):
        _parse("newmtl A\n", assets)
        assert len(assets) == 0

    def test_same_text_same_guids(self, assets):
        first = _parse("newmtl A\nnewmtl B\n", assets)
        second = _parse("newmtl A\nnewmtl B\n", assets)
        assert [m.guid for m in first] == [m.guid for m in second]


# ============================================================================
# Properties
# ============================================================================

class TestProperties:

    def test_colours_clamped(self, assets):
        material = _parse("newmtl X\nKd 2.0 -1.0 0.5\n", assets)[0]
        assert material.base_colour == (1.0, 0.0, 0.5)

    def test_ambient_and_specular(self, assets):
        material = _parse("newmtl X\nKa 0.1 0.2 0.3\nKs 0.4 0.5 0.6\n", assets)[0]
        assert material.ambient_colour == (0.1, 0.2, 0.3)
        assert material.specular_colour == (0.4, 0.5, 0.6)

    def test_alpha(self, assets):
        assert _parse("newmtl X\na 0.25\n", assets)[0].alpha == 0.25
        assert _parse("newmtl X\na 3\n", assets)[0].alpha == 1.0

    def test_transparency(self, assets):
        assert _parse("newmtl X\nTr 0.25\n", assets)[0].alpha == 0.75
        assert _parse("newmtl X\nTr 2\n", assets)[0].alpha == 0.0

    def test_shininess_clamped(self, assets):
        assert _parse("newmtl X\nNs 0.5\n", assets)[0].shininess == 0.5
        assert _parse("newmtl X\nNs 250\n", assets)[0].shininess == 1.0

    def test_illumination_model(self, assets):
        material = _parse("newmtl X\nillum 2\n", assets)[0]
        assert material.illumination_model is IlluminationModel.SPECULAR

    def test_unknown_illumination_kept_as_int(self, assets):
        assert _parse("newmtl X\nillum 7\n", assets)[0].illumination_model == 7

    def test_keywords_case_insensitive(self, assets):
        material = _parse("NEWMTL X\nkD 0 1 0\nTR 0.5\n", assets)[0]
        assert material.base_colour == (0.0, 1.0, 0.0)
        assert material.alpha == 0.5

    def test_comments_and_unknown_commands_ignored(self, assets):
        text = "# header comment\nnewmtl X\nNi 1.45\nmap_Kd wood.png\n# Kd 0 0 0\n"
        material = _parse(text, assets)[0]
        assert material.base_colour == (0.8, 0.8, 0.8)

    def test_short_commands_ignored(self, assets):
        materials = _parse("newmtl\nKd\nnewmtl X\nNs\n", assets)
        assert [m.name for m in materials] == ["X"]

    @pytest.mark.parametrize("text", ["newmtl X\r\nKd 1 0 0\r\n", "newmtl X\rKd 1 0 0\r"])
    def test_line_endings(self, assets, text):
        material = _parse(text, assets)[0]
        assert material.name == "X"
        assert material.base_colour == (1.0, 0.0, 0.0)

    def test_split_lines(self):
        assert split_lines("a\r\nb\rc\nd") == ["a", "b", "c", "d"]


# ============================================================================
# Texture references
# ============================================================================

class TestTextureReferences:

    def test_missing_texture_left_unset(self, assets):
        material = _parse("newmtl A\nmap_Ka missing.png\n", assets)[0]
        assert material.name == "A"
        assert material.base_map is None

    def test_texture_resolved_relative_to_file(self, assets):
        texture = _add_texture(assets, "base/textures/wood.png")
        material = _parse("newmtl A\nmap_Ka ../textures/wood.png\n", assets)[0]
        assert material.base_map is texture

    def test_texture_in_same_directory(self, assets):
        texture = _add_texture(assets, "base/materials/wood.png")
        material = _parse("newmtl A\nmap_Ka wood.png\n", assets)[0]
        assert material.base_map is texture

    def test_cross_package_reference(self, assets):
        texture = _add_texture(assets, "core/textures/stone.png")
        material = _parse("newmtl A\nmap_Ka ../../core/textures/stone.png\n", assets)[0]
        assert material.base_map is texture


# ============================================================================
# Failures
# ============================================================================

class TestFailures:

    def test_property_without_material(self, assets):
        parser = MtlParser(assets, PATH, BASE, "base")
        with pytest.raises(NoActiveAssetError) as exc_info:
            parser.parse("Kd 1 1 1\n")
        assert exc_info.value.command == "Kd"
        assert exc_info.value.span.line == 1
        assert len(assets) == 0

    @pytest.mark.parametrize("text", ["a 1\n", "Tr 0\n", "Ns 1\n", "illum 1\n", "map_Ka x.png\n"])
    def test_every_property_requires_material(self, assets, text):
        with pytest.raises(NoActiveAssetError):
            _parse(text, assets)

    def test_non_numeric_colour(self, assets):
        with pytest.raises(FormatError) as exc_info:
            _parse("newmtl X\n\nKd 1.0 red 0.0\n", assets)
        assert exc_info.value.line == 3

    @pytest.mark.parametrize("text", ["newmtl X\nKd 1 1\n", "newmtl X\nKd 1 1 1 1\n"])
    def test_colour_needs_three_components(self, assets, text):
        with pytest.raises(FormatError) as exc_info:
            _parse(text, assets)
        assert exc_info.value.line == 2

    @pytest.mark.parametrize("token", ["nan", "inf", "1,5", "1_0", "0x1"])
    def test_rejects_non_decimal_numbers(self, assets, token):
        with pytest.raises(FormatError):
            _parse(f"newmtl X\nNs {token}\n", assets)

    def test_non_integer_illum(self, assets):
        with pytest.raises(FormatError):
            _parse("newmtl X\nillum 1.5\n", assets)

    def test_error_message_carries_line(self, assets):
        with pytest.raises(FormatError, match=r"\(line 2\)"):
            _parse("newmtl X\nTr abc\n", assets)
