"""
Error types and validation reports (registry/errors.py).
"""

from modkit.registry.errors import (
    AssetIOError,
    CyclicDependencyError,
    DuplicateGuidError,
    DuplicateNameError,
    ErrorSpan,
    FormatError,
    NoActiveAssetError,
    RegistryError,
    UnresolvedDependencyError,
    ValidationReport,
)
from modkit.registry.package import DependencyDescriptor


class TestErrorFormatting:

    def test_span(self):
        assert str(ErrorSpan(file="a.mtl", line=3, column=2)) == "a.mtl:3:2"
        assert str(ErrorSpan(file="a.mtl")) == "a.mtl"

    def test_format_error(self):
        error = RegistryError(
            "Something broke",
            span=ErrorSpan(file="mods/core/package.yaml", line=4),
            suggestion="Fix it",
            details={"package": "core"},
        )
        text = error.format_error()
        assert "RegistryError: Something broke" in text
        assert "at mods/core/package.yaml:4" in text
        assert "- package: core" in text
        assert "Suggestion: Fix it" in text
        assert str(error) == text

    def test_unresolved_dependency(self):
        dep = DependencyDescriptor.create("core", ">=2.0")
        error = UnresolvedDependencyError("base", dep, "package not found")
        assert error.message == "Package 'base' has unresolved dependency 'core: >=2.0.0': package not found"
        assert "'>=2.0.0'" in error.suggestion

    def test_cycle_message(self):
        error = CyclicDependencyError("a", ["a", "b"])
        assert "a → b → a" in error.message

    def test_duplicate_name_lists_sources(self):
        error = DuplicateNameError("core", ["mods/core/package.yaml", "other/core/package.yaml"])
        assert "other/core/package.yaml" in error.message

    def test_format_error_line(self):
        error = FormatError("Expected a number, got 'x'", line=7)
        assert error.line == 7
        assert error.message.endswith("(line 7)")

    def test_no_active_asset(self):
        error = NoActiveAssetError("Kd", span=ErrorSpan(file="a.mtl", line=1))
        assert error.message == "No material defined for `Kd` at line 1"

    def test_asset_io(self):
        error = AssetIOError("mods/core/a.png", "No such file or directory")
        assert error.span.file == "mods/core/a.png"

    def test_duplicate_guid(self):
        error = DuplicateGuidError(255, "a/x.png", "b/y.png")
        assert "00000000000000ff" in error.message


class TestValidationReport:

    def test_empty(self):
        report = ValidationReport()
        assert not report.has_errors()
        assert report.format_report() == "✅ No errors"
        assert report.to_dict() == {"error_count": 0, "errors": []}

    def test_collects(self):
        report = ValidationReport()
        report.add_error(CyclicDependencyError("a", ["a", "b"]))
        report.add_error(FormatError("bad", line=1))

        data = report.to_dict()
        assert data["error_count"] == 2
        assert [e["type"] for e in data["errors"]] == ["CyclicDependencyError", "FormatError"]
        assert "2 error(s)" in report.format_report()
