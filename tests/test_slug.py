"""Tests for slug derivation."""

import pytest

from prompt_registry.core.slug import generate_slug, is_blank


class TestGenerateSlug:
    """Tests for generate_slug."""

    def test_lowercases_and_hyphenates(self) -> None:
        """Spaces become hyphens and letters are lowercased."""
        assert generate_slug("My Test Prompt") == "my-test-prompt"

    def test_drops_punctuation(self) -> None:
        """Characters outside [a-z0-9-] are removed."""
        assert generate_slug("Hello, World!") == "hello-world"

    def test_keeps_digits_and_hyphens(self) -> None:
        """Digits and existing hyphens survive."""
        assert generate_slug("GPT-4 prompt 2") == "gpt-4-prompt-2"

    def test_accents_are_removed_not_transliterated(self) -> None:
        """Non-ASCII letters are dropped."""
        assert generate_slug("Café Menu") == "caf-menu"

    def test_consecutive_spaces_keep_every_hyphen(self) -> None:
        """Runs of spaces are not collapsed."""
        assert generate_slug("a  b") == "a--b"

    def test_collisions_are_possible(self) -> None:
        """Different titles can derive the same slug."""
        assert generate_slug("Test!") == generate_slug("Test?") == "test"

    def test_all_punctuation_gives_empty(self) -> None:
        """Nothing survives a title made only of punctuation."""
        assert generate_slug("!!!") == ""


class TestIsBlank:
    """Tests for is_blank."""

    @pytest.mark.parametrize("value", [None, "", "   ", "\n\t "])
    def test_blank_values(self, value: str | None) -> None:
        """None, empty and whitespace-only strings are blank."""
        assert is_blank(value)

    def test_non_blank_value(self) -> None:
        """Surrounding whitespace does not make text blank."""
        assert not is_blank("  hello  ")
