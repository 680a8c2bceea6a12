"""Tests for site input validation and timestamp helpers."""

from datetime import datetime, timedelta, timezone

import pytest

from uptime_monitor.core.validation import (
    MAX_ALIAS_LENGTH,
    validate_alias,
    validate_site,
    validate_url,
)
from uptime_monitor.utils.timeutils import truncate_timestamp, utc_isoformat, utcnow


@pytest.mark.unit
class TestValidateUrl:
    """Test URL validation."""

    @pytest.mark.parametrize("url", [
        "https://example.com",
        "http://example.com:8080/health?full=1",
        "http://127.0.0.1/status",
    ])
    def test_absolute_urls_accepted(self, url):
        assert validate_url(url) == []

    @pytest.mark.parametrize("url", [
        "",
        "   ",
        "not a url",
        "/relative/path",
        "example.com",
    ])
    def test_malformed_urls_rejected(self, url):
        assert validate_url(url) != []

    def test_overlong_url_rejected(self):
        url = "https://example.com/" + "a" * 3000
        errors = validate_url(url)
        assert len(errors) == 1
        assert "at most" in errors[0]


@pytest.mark.unit
class TestValidateAlias:
    """Test alias validation."""

    def test_simple_alias(self):
        assert validate_alias("ex") == []

    def test_empty_alias(self):
        assert validate_alias("") == ["alias must not be empty"]
        assert validate_alias("  ") == ["alias must not be empty"]

    def test_alias_length_limit(self):
        assert validate_alias("a" * MAX_ALIAS_LENGTH) == []
        assert validate_alias("a" * (MAX_ALIAS_LENGTH + 1)) != []

    @pytest.mark.parametrize("alias", ["a/b", "/", "ex?x=1", "ex#top", "100%"])
    def test_path_unsafe_alias_rejected(self, alias):
        errors = validate_alias(alias)

        assert len(errors) == 1
        assert "must not contain" in errors[0]

    def test_punctuation_alias_accepted(self):
        assert validate_alias("my-site_v2.example") == []


@pytest.mark.unit
def test_validate_site_collects_both_fields():
    """Errors for url and alias are reported together."""
    result = validate_site("not a url", "")

    assert not result.is_valid
    assert len(result.errors) == 2


@pytest.mark.unit
def test_validate_site_valid():
    result = validate_site("https://example.com", "ex")

    assert result.is_valid
    assert result.errors == []


@pytest.mark.unit
class TestTruncateTimestamp:
    """Test bucket truncation."""

    def test_hour_truncation(self):
        value = datetime(2024, 5, 10, 12, 34, 56, 789)
        assert truncate_timestamp(value, 3600) == datetime(2024, 5, 10, 12)

    def test_day_truncation(self):
        value = datetime(2024, 5, 10, 23, 59, 59)
        assert truncate_timestamp(value, 86400) == datetime(2024, 5, 10)

    def test_bucket_start_is_fixed_point(self):
        value = datetime(2024, 5, 10, 12)
        assert truncate_timestamp(value, 3600) == value

    def test_aware_value_converted_to_utc(self):
        value = datetime(2024, 5, 10, 14, 30, tzinfo=timezone(timedelta(hours=2)))
        assert truncate_timestamp(value, 3600) == datetime(2024, 5, 10, 12)

    def test_invalid_bucket_width(self):
        with pytest.raises(ValueError):
            truncate_timestamp(datetime(2024, 5, 10), 0)


@pytest.mark.unit
def test_utcnow_is_naive():
    assert utcnow().tzinfo is None


@pytest.mark.unit
class TestUtcIsoformat:
    """Test UTC serialization of stored timestamps."""

    def test_naive_value_gets_utc_offset(self):
        assert utc_isoformat(datetime(2024, 5, 10, 12)) == "2024-05-10T12:00:00+00:00"

    def test_aware_value_converted(self):
        value = datetime(2024, 5, 10, 14, tzinfo=timezone(timedelta(hours=2)))
        assert utc_isoformat(value) == "2024-05-10T12:00:00+00:00"
