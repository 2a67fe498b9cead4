"""Unit tests for token extraction and classification."""

import pytest

from chartcalc.formula.tokens import (
    TokenKind,
    classify_token,
    extract_tokens,
    extract_variables_from_formula,
)


class TestExtractVariables:
    """Tests for extract_variables_from_formula."""

    def test_extract_in_first_seen_order(self):
        """Tokens are returned in order of first appearance."""
        result = extract_variables_from_formula("([female]+[male])/[approvedImages]")
        assert result == ["female", "male", "approvedImages"]

    def test_extract_deduplicates(self):
        """Repeated tokens appear once."""
        result = extract_variables_from_formula("[a]+[b]*[a]-[b]")
        assert result == ["a", "b"]

    def test_extract_prefixed_tokens(self):
        """PARAM, MANUAL and asset tokens keep their prefix."""
        result = extract_variables_from_formula(
            "[jersey]*[PARAM:jerseyPrice]+[MANUAL:visits]+[MEDIA:logo-abc]"
        )
        assert result == ["jersey", "PARAM:jerseyPrice", "MANUAL:visits", "MEDIA:logo-abc"]

    def test_extract_dotted_path(self):
        """Legacy stats.x paths are extracted whole."""
        assert extract_variables_from_formula("[stats.female]") == ["stats.female"]

    def test_extract_unterminated_bracket(self):
        """An unterminated bracket yields no match and does not raise."""
        assert extract_variables_from_formula("[female + 2") == []
        assert extract_variables_from_formula("[a] + [b") == ["a"]

    def test_extract_no_tokens(self):
        """Plain arithmetic has no tokens."""
        assert extract_variables_from_formula("1 + 2") == []
        assert extract_variables_from_formula("") == []


class TestClassifyToken:
    """Tests for classify_token."""

    @pytest.mark.parametrize(
        "literal,kind,key",
        [
            ("female", TokenKind.FIELD, "female"),
            ("stats.female", TokenKind.FIELD, "stats.female"),
            ("PARAM:jerseyPrice", TokenKind.PARAM, "jerseyPrice"),
            ("MANUAL:total_visits", TokenKind.MANUAL, "total_visits"),
            ("MEDIA:logo-1", TokenKind.MEDIA, "logo-1"),
            ("TEXT:exec-summary", TokenKind.TEXT, "exec-summary"),
        ],
    )
    def test_classify(self, literal, kind, key):
        """Each prefix maps to its kind."""
        token = classify_token(literal)
        assert token.kind is kind
        assert token.key == key
        assert token.literal == literal

    @pytest.mark.parametrize(
        "literal",
        ["FOO:bar", "MEDIA:Logo", "PARAM:price-eur", "TEXT:", "logo-abc"],
    )
    def test_classify_unknown(self, literal):
        """Bodies outside the grammar are not tokens."""
        assert classify_token(literal) is None

    def test_external_and_asset_flags(self):
        """PARAM/MANUAL are external, MEDIA/TEXT are assets."""
        assert classify_token("PARAM:x").is_external
        assert classify_token("MANUAL:x").is_external
        assert not classify_token("x").is_external
        assert classify_token("MEDIA:x").is_asset
        assert classify_token("TEXT:x").is_asset

    def test_extract_tokens_drops_unknown(self):
        """extract_tokens skips bodies that match no kind."""
        tokens = extract_tokens("[a]+[FOO:b]+[PARAM:c]")
        assert [t.literal for t in tokens] == ["a", "PARAM:c"]
