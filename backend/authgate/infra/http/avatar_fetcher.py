from __future__ import annotations

import requests

from authgate.services._shared.ports import AvatarFetcher

MAX_AVATAR_BYTES = 5 * 1024 * 1024
CHUNK_SIZE = 64 * 1024


class RequestsAvatarFetcher(AvatarFetcher):
    """
    Download avatar images over HTTP.

    The body is streamed and the download stops as soon as it passes
    ``MAX_AVATAR_BYTES``. Any transport error, non-2xx status or oversize
    body surfaces as ``OSError`` so callers handle a single failure type.
    """

    def __init__(self, *, timeout: float = 10, session: requests.Session | None = None) -> None:
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(self, url: str) -> bytes:
        body = bytearray()
        try:
            with self.session.get(url, timeout=self.timeout, stream=True) as resp:
                resp.raise_for_status()
                declared = resp.headers.get("Content-Length", "")
                if declared.isdigit() and int(declared) > MAX_AVATAR_BYTES:
                    raise OSError("Avatar exceeds size limit")
                for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                    body.extend(chunk)
                    if len(body) > MAX_AVATAR_BYTES:
                        raise OSError("Avatar exceeds size limit")
        except requests.RequestException as exc:
            raise OSError(f"Avatar download failed: {exc}") from exc
        return bytes(body)
