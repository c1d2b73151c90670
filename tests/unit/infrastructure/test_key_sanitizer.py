"""Tests for KeySanitizer."""

import pytest

from entity_persistence.infrastructure.key_sanitizer import KeySanitizer


class TestKeySanitizer:
    """Test cases for key to file name encoding."""

    @pytest.mark.parametrize(
        "key",
        ["user-1", "a/b/c", "..", "with space", "dots.in.key", "100%", "ümlaut", "a\\b", "~home"],
    )
    def test_reversible(self, key):
        assert KeySanitizer.from_filename(KeySanitizer.to_filename(key)) == key

    def test_plain_key_unchanged(self):
        assert KeySanitizer.to_filename("user_1-A") == "user_1-A"

    def test_no_separators_or_dots_in_output(self):
        encoded = KeySanitizer.to_filename("../etc/passwd")

        assert "/" not in encoded
        assert "." not in encoded

    def test_empty_key_rejected(self):
        with pytest.raises(ValueError):
            KeySanitizer.to_filename("   ")
