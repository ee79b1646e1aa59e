import logging

import pytest

from request_portal.app.core.errors import InvalidReference
from request_portal.app.services.registration_service import RegistrationResolver, extract_sheet_id

from conftest import REGISTER_ID, REGISTER_URL


def test_extract_sheet_id():
    assert extract_sheet_id(REGISTER_URL) == REGISTER_ID
    assert extract_sheet_id("https://docs.google.com/spreadsheets/d/abc-123_x") == "abc-123_x"


@pytest.mark.parametrize("url", ["", "https://forms.gle/abc", "not a url", "https://docs.google.com/document/d/xyz/edit"])
def test_extract_sheet_id_rejects_other_urls(url):
    with pytest.raises(InvalidReference):
        extract_sheet_id(url)


def test_match_is_case_and_whitespace_insensitive(repository):
    resolver = RegistrationResolver(repository)
    assert resolver.is_registered(REGISTER_URL, "x@y.com")
    assert resolver.is_registered(REGISTER_URL, "  X@Y.COM ")
    assert resolver.is_registered(REGISTER_URL, "other@example.org")
    assert not resolver.is_registered(REGISTER_URL, "z@y.com")


def test_header_row_is_skipped(repository):
    resolver = RegistrationResolver(repository)
    assert not resolver.is_registered(REGISTER_URL, "Email")


def test_blank_email_is_never_registered(repository):
    repository.external[REGISTER_ID].append([""])
    assert not RegistrationResolver(repository).is_registered(REGISTER_URL, "   ")


def test_unreachable_list_degrades_to_not_registered(repository, caplog):
    url = "https://docs.google.com/spreadsheets/d/MISSING/edit"
    with caplog.at_level(logging.ERROR):
        assert RegistrationResolver(repository).is_registered(url, "x@y.com") is False
    assert "MISSING" in caplog.text


def test_invalid_reference_propagates(repository):
    with pytest.raises(InvalidReference):
        RegistrationResolver(repository).is_registered("https://example.com/list.csv", "x@y.com")
