"""Unit tests for post input normalization."""

import pytest

from inkwell.community.post_service import MAX_TAGS, normalize_tags
from inkwell.errors import ValidationError


class TestNormalizeTags:
    def test_trims_and_dedupes(self):
        """Tags are trimmed and deduplicated."""
        assert normalize_tags([" growth ", "growth", "", "seo"]) == ["growth", "seo"]

    def test_none(self):
        """No tags gives an empty list."""
        assert normalize_tags(None) == []

    def test_too_many(self):
        """More than ten tags is rejected."""
        with pytest.raises(ValidationError):
            normalize_tags([f"t{i}" for i in range(MAX_TAGS + 1)])

    def test_tag_too_long(self):
        """Overlong tags are rejected."""
        with pytest.raises(ValidationError):
            normalize_tags(["x" * 65])
