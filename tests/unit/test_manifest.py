"""Unit tests for manifest parsing and loading."""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from voicegen.errors import ManifestError
from voicegen.manifest import (
    ManifestItem,
    load_manifest,
    normalize_relative_path,
    parse_manifest,
)


class TestNormalizeRelativePath:
    """Test relative path normalization."""

    def test_joins_directory_and_file_name(self) -> None:
        """Test that path and file name join with a forward slash."""
        assert normalize_relative_path("digits", "1") == "digits/1"

    def test_backslashes_are_separators(self) -> None:
        """Test that Windows-style separators produce the same key."""
        assert normalize_relative_path("custom\\ivr", "welcome") == "custom/ivr/welcome"

    def test_redundant_segments_removed(self) -> None:
        """Test that ./ and double slashes are collapsed."""
        assert normalize_relative_path("./digits//", "1") == "digits/1"

    def test_leading_slash_removed(self) -> None:
        """Test that absolute-looking paths stay relative to the output root."""
        assert normalize_relative_path("/digits", "1") == "digits/1"

    def test_empty_directory(self) -> None:
        """Test that an empty directory yields just the file name."""
        assert normalize_relative_path("", "beep") == "beep"
        assert normalize_relative_path("", "") == ""


class TestParseManifest:
    """Test manifest structure validation."""

    def test_parses_items_in_order(self) -> None:
        """Test that entries become ManifestItems in file order."""
        items = parse_manifest(
            [
                {"path": "digits", "fileName": "1", "speechText": "one"},
                {"path": "digits", "fileName": "2", "speechText": "two"},
            ]
        )

        assert items == [
            ManifestItem(path="digits", file_name="1", speech_text="one"),
            ManifestItem(path="digits", file_name="2", speech_text="two"),
        ]
        assert items[0].relative_path == "digits/1"

    def test_relative_path_alias(self) -> None:
        """Test that relativePath is accepted in place of path."""
        items = parse_manifest(
            [{"relativePath": "ivr", "fileName": "menu", "speechText": "Menu"}]
        )
        assert items[0].relative_path == "ivr/menu"

    def test_missing_fields_become_empty(self) -> None:
        """Test that missing fields are tolerated at load time."""
        items = parse_manifest([{"fileName": "beep"}])

        assert items[0].path == ""
        assert items[0].speech_text == ""

    def test_non_list_raises(self) -> None:
        """Test that a top-level object is rejected."""
        with pytest.raises(ManifestError, match="must be a JSON array"):
            parse_manifest({"items": []})

    def test_non_object_entry_raises(self) -> None:
        """Test that non-object entries are rejected."""
        with pytest.raises(ManifestError, match="entry 1 must be an object"):
            parse_manifest([{"fileName": "a"}, "b"])

    def test_path_escaping_output_root_raises(self) -> None:
        """Test that .. segments cannot leave the output root."""
        with pytest.raises(ManifestError, match="escapes the output root"):
            parse_manifest([{"path": "../etc", "fileName": "passwd", "speechText": "x"}])


class TestLoadManifest:
    """Test manifest file loading."""

    def test_load_valid_file(self, write_manifest) -> None:
        """Test that a valid manifest file loads."""
        path = write_manifest(
            [{"path": "ivr", "fileName": "welcome", "speechText": "Bem-vindo"}]
        )

        items = load_manifest(path)

        assert len(items) == 1
        assert items[0].speech_text == "Bem-vindo"

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        """Test that an unreadable manifest is a ManifestError."""
        with pytest.raises(ManifestError, match="Failed to read manifest"):
            load_manifest(tmp_path / "missing.json")

    def test_invalid_json_raises(self, tmp_path: Path) -> None:
        """Test that malformed JSON is a ManifestError."""
        path = tmp_path / "broken.json"
        path.write_text("[{", encoding="utf-8")

        with pytest.raises(ManifestError, match="Invalid JSON"):
            load_manifest(path)
