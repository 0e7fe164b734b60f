# tests/unit/infra/test_avatar_fetcher.py
from __future__ import annotations

import pytest
import responses
from authgate.infra.http import RequestsAvatarFetcher
from authgate.infra.http.avatar_fetcher import MAX_AVATAR_BYTES

URL = "https://lh3.example.com/a/photo.jpg"


@responses.activate
def test_fetch_returns_body():
    responses.add(responses.GET, URL, body=b"\xff\xd8\xff", status=200)
    assert RequestsAvatarFetcher().fetch(URL) == b"\xff\xd8\xff"


@responses.activate
def test_http_error_becomes_oserror():
    responses.add(responses.GET, URL, status=404)
    with pytest.raises(OSError, match="download failed"):
        RequestsAvatarFetcher().fetch(URL)


@responses.activate
def test_connection_error_becomes_oserror():
    # No registered response: responses raises ConnectionError.
    with pytest.raises(OSError):
        RequestsAvatarFetcher().fetch(URL)


@responses.activate
def test_oversize_body_rejected():
    responses.add(responses.GET, URL, body=b"x" * (MAX_AVATAR_BYTES + 1), status=200)
    with pytest.raises(OSError, match="size limit"):
        RequestsAvatarFetcher().fetch(URL)


@responses.activate
def test_download_stops_once_limit_is_passed(monkeypatch):
    monkeypatch.setattr("authgate.infra.http.avatar_fetcher.MAX_AVATAR_BYTES", 10)
    monkeypatch.setattr("authgate.infra.http.avatar_fetcher.CHUNK_SIZE", 4)
    responses.add(responses.GET, URL, body=b"x" * 11, status=200)

    with pytest.raises(OSError, match="size limit"):
        RequestsAvatarFetcher().fetch(URL)


@responses.activate
def test_body_at_limit_is_accepted(monkeypatch):
    monkeypatch.setattr("authgate.infra.http.avatar_fetcher.MAX_AVATAR_BYTES", 10)
    monkeypatch.setattr("authgate.infra.http.avatar_fetcher.CHUNK_SIZE", 4)
    responses.add(responses.GET, URL, body=b"x" * 10, status=200)

    assert RequestsAvatarFetcher().fetch(URL) == b"x" * 10
