"""Tests for talon directory validation."""

from pathlib import Path

from talon import exit_codes
from talon.manifest import MANIFEST_FILE
from talon.validation import ValidationResult, validate_talon_dir
from tests.conftest import build_command, make_manifest, write_talon


class TestValidationResult:
    """Tests for ValidationResult dataclass."""

    def test_defaults(self) -> None:
        """Verify errors default to empty and no exit code is set."""
        # When
        result = ValidationResult(is_valid=True)

        # Then
        assert result.errors == []
        assert result.error_code is None
        assert result.manifest is None


class TestValidateTalonDir:
    """Tests for validate_talon_dir."""

    def test_valid_talon(self, tmp_path: Path) -> None:
        """Verify a well-formed talon passes and returns its manifest."""
        # Given
        write_talon(tmp_path, make_manifest("ok"))

        # When
        result = validate_talon_dir(tmp_path)

        # Then
        assert result.is_valid is True
        assert result.manifest is not None
        assert result.manifest.name == "ok"

    def test_missing_path(self, tmp_path: Path) -> None:
        """Verify a nonexistent path fails with TALON_NOT_FOUND."""
        # When
        result = validate_talon_dir(tmp_path / "nope")

        # Then
        assert result.is_valid is False
        assert result.error_code == exit_codes.TALON_NOT_FOUND
        assert "does not exist" in result.errors[0]

    def test_file_instead_of_directory(self, tmp_path: Path) -> None:
        """Verify a file path is rejected."""
        # Given
        file_path = tmp_path / MANIFEST_FILE
        file_path.write_text("---\nname: x\n---\n")

        # When
        result = validate_talon_dir(file_path)

        # Then
        assert result.is_valid is False
        assert "not a directory" in result.errors[0]

    def test_missing_manifest(self, tmp_path: Path) -> None:
        """Verify a directory without TALON.md fails."""
        # When
        result = validate_talon_dir(tmp_path)

        # Then
        assert result.is_valid is False
        assert result.errors == [f"Missing {MANIFEST_FILE} file"]
        assert result.error_code == exit_codes.TALON_INVALID

    def test_invalid_manifest(self, tmp_path: Path) -> None:
        """Verify parse errors are reported."""
        # Given
        (tmp_path / MANIFEST_FILE).write_text("---\nname: x\n---\n")

        # When
        result = validate_talon_dir(tmp_path)

        # Then
        assert result.is_valid is False
        assert "version" in result.errors[0]

    def test_duplicate_command_names(self, tmp_path: Path) -> None:
        """Verify commands declared twice are flagged once each."""
        # Given
        commands = [build_command("sync"), build_command("sync"), build_command("sync")]
        write_talon(tmp_path, make_manifest("dup", commands=commands))

        # When
        result = validate_talon_dir(tmp_path)

        # Then
        assert result.is_valid is False
        assert result.errors == ["Command 'sync' is declared more than once"]
