"""Fetch images, cover and fonts from disk or the network."""

import base64
import logging
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from urllib.parse import unquote, unquote_to_bytes, urlsplit

import requests

from epub_gen.errors import ImageFetchError

log = logging.getLogger(__name__)

USER_AGENT = "epub-gen/0.1"


class ResourceFetcher:
    """Retrieve packaged resources with bounded timeout, retries and workers.

    Sources may be ``http(s)://`` URLs, ``file://`` URLs, ``data:`` URIs or
    plain filesystem paths (relative paths resolve against ``base_dir``).
    """

    def __init__(
        self,
        proxy: str | None = None,
        timeout: float = 10.0,
        retries: int = 2,
        workers: int = 4,
        base_dir: Path | None = None,
        session: requests.Session | None = None,
    ):
        self.timeout = timeout
        self.retries = retries
        self.workers = workers
        self.base_dir = base_dir
        self._session = session or requests.Session()
        self._session.headers.setdefault("User-Agent", USER_AGENT)
        if proxy:
            self._session.proxies.update({"http": proxy, "https": proxy})

    def fetch(self, source: str) -> bytes:
        """Return the bytes of ``source``.

        Raises:
            ImageFetchError: If the resource cannot be read.
        """
        scheme = urlsplit(source).scheme.lower()
        if scheme in ("http", "https"):
            return self._fetch_remote(source)
        if scheme == "data":
            return self._decode_data_uri(source)
        return self._read_local(source)

    def fetch_many(self, sources: Iterable[str], strict: bool = False) -> dict[str, bytes]:
        """Fetch several resources concurrently.

        Failures are isolated per resource: they are logged and left out of
        the result, unless ``strict`` is set, in which case the first
        failure is raised.
        """
        unique = list(dict.fromkeys(sources))
        if not unique:
            return {}

        results: dict[str, bytes] = {}
        with ThreadPoolExecutor(max_workers=min(self.workers, len(unique))) as pool:
            futures = {source: pool.submit(self.fetch, source) for source in unique}
            for source, future in futures.items():
                try:
                    results[source] = future.result()
                except ImageFetchError as e:
                    if strict:
                        raise
                    log.warning(f"Skipping resource: {e.message}")
        return results

    def _fetch_remote(self, url: str) -> bytes:
        last_error: Exception | None = None
        for attempt in range(self.retries + 1):
            try:
                response = self._session.get(url, timeout=self.timeout)
                response.raise_for_status()
                return response.content
            except requests.RequestException as exc:
                last_error = exc
                log.info(f"Fetch attempt {attempt + 1} for {url} failed: {exc}")
        raise ImageFetchError(url, f"giving up after {self.retries + 1} attempt(s): {last_error}")

    def _read_local(self, source: str) -> bytes:
        parts = urlsplit(source)
        if parts.scheme.lower() == "file":
            path = Path(unquote(parts.path))
        else:
            path = Path(source.split("?", 1)[0].split("#", 1)[0])
        if not path.is_absolute() and self.base_dir is not None:
            path = self.base_dir / path
        try:
            return path.read_bytes()
        except OSError as exc:
            raise ImageFetchError(source, str(exc)) from exc

    def _decode_data_uri(self, source: str) -> bytes:
        try:
            header, payload = source.split(",", 1)
        except ValueError as exc:
            raise ImageFetchError(source[:40], "malformed data URI") from exc
        try:
            if header.endswith(";base64"):
                return base64.b64decode(payload, validate=True)
            return unquote_to_bytes(payload)
        except ValueError as exc:
            raise ImageFetchError(source[:40], f"undecodable data URI: {exc}") from exc
