"""Tests for helper functions."""

import pytest

from drive.utils import (
    content_disposition,
    generate_uuid,
    is_valid_id,
    normalize_name,
    safe_redirect_target,
)


class TestIds:
    def test_generated_ids_are_valid(self):
        assert is_valid_id(generate_uuid())

    @pytest.mark.parametrize("value", ["", "abc", "../etc", None, "12345678-1234"])
    def test_invalid_ids(self, value):
        assert not is_valid_id(value)


@pytest.mark.parametrize("raw,expected", [
    ("  Docs ", "Docs"),
    ("", ""),
    (None, ""),
])
def test_normalize_name(raw, expected):
    assert normalize_name(raw) == expected


class TestSafeRedirectTarget:
    def test_return_to_wins(self):
        assert safe_redirect_target("/drive/abc", "http://testserver/x", "testserver", "/drive") == "/drive/abc"

    @pytest.mark.parametrize("return_to", [
        "https://evil.example/",
        "//evil.example/path",
        "/\\evil.example",
        "javascript:alert(1)",
    ])
    def test_external_return_to_ignored(self, return_to):
        assert safe_redirect_target(return_to, None, "testserver", "/drive") == "/drive"

    def test_same_host_referer(self):
        target = safe_redirect_target(None, "http://testserver/drive/abc?x=1", "testserver", "/drive")
        assert target == "/drive/abc?x=1"

    def test_foreign_referer_ignored(self):
        assert safe_redirect_target(None, "https://evil.example/drive", "testserver", "/drive") == "/drive"

    def test_default(self):
        assert safe_redirect_target(None, None, "testserver", "/drive/xyz") == "/drive/xyz"


class TestContentDisposition:
    def test_ascii_name(self):
        assert content_disposition("report.pdf") == 'attachment; filename="report.pdf"'

    def test_non_ascii_name(self):
        header = content_disposition("résumé.txt")
        assert header == "attachment; filename=\"r_sum_.txt\"; filename*=utf-8''r%C3%A9sum%C3%A9.txt"

    def test_name_with_quotes_and_spaces(self):
        header = content_disposition('my "best" file.txt')
        assert header == "attachment; filename=\"my _best_ file.txt\"; filename*=utf-8''my%20%22best%22%20file.txt"

    def test_fallback_is_always_ascii(self):
        header = content_disposition("отчёт 2024.pdf")
        fallback = header.split(";")[1]
        assert fallback == ' filename="_____ 2024.pdf"'
        header.encode("latin-1")
