"""HTTP(S) GET to a local file with per-request timeouts and capped redirects."""
import http.client
import logging
import os
import socket
import urllib.error
import urllib.request
from urllib.parse import urljoin

from ..engine.errors import AcquireSignal, DownloadError

log = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024
_REDIRECT_CODES = (301, 302)


class _NoRedirect(urllib.request.HTTPRedirectHandler):
    """Surface 3xx responses as HTTPError so hops can be counted."""

    def redirect_request(self, req, fp, code, msg, headers, newurl):
        return None


def build_opener() -> urllib.request.OpenerDirector:
    return urllib.request.build_opener(_NoRedirect)


def _remove(path: str) -> None:
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass


def download_file(url: str, dest_path: str, timeout: float, *,
                  max_redirects: int = 5, opener=None) -> int:
    """Download *url* to *dest_path*. Returns the number of bytes written.

    301/302 responses are followed via ``Location`` up to *max_redirects*
    hops. Any other non-200 status, a timeout, a connection error, or a
    malformed or truncated HTTP response raises DownloadError; a partial
    file is never left behind.
    """
    opener = opener or build_opener()
    hops = 0
    while True:
        _remove(dest_path)
        try:
            with opener.open(url, timeout=timeout) as resp:
                status = getattr(resp, "status", 200)
                if status in _REDIRECT_CODES:
                    location = resp.headers.get("Location")
                elif status != 200:
                    raise DownloadError(f"HTTP {status}: {url}")
                else:
                    return _stream_to_file(resp, dest_path)
        except urllib.error.HTTPError as e:
            e.close()
            if e.code not in _REDIRECT_CODES:
                raise DownloadError(f"HTTP {e.code}: {url}") from e
            location = e.headers.get("Location") if e.headers else None
        except (socket.timeout, TimeoutError) as e:
            _remove(dest_path)
            raise DownloadError(f"Download timeout: {url}", AcquireSignal.TIMEOUT) from e
        except urllib.error.URLError as e:
            _remove(dest_path)
            if isinstance(e.reason, (socket.timeout, TimeoutError)):
                raise DownloadError(f"Download timeout: {url}", AcquireSignal.TIMEOUT) from e
            raise DownloadError(f"Download failed: {url}: {e.reason}") from e
        except OSError as e:
            _remove(dest_path)
            raise DownloadError(f"Download failed: {url}: {e}") from e
        except http.client.HTTPException as e:
            _remove(dest_path)
            raise DownloadError(f"Download failed: {url}: {e!r}") from e

        if not location:
            raise DownloadError(f"Redirect without Location header: {url}")
        hops += 1
        if hops > max_redirects:
            raise DownloadError(f"Too many redirects (>{max_redirects}): {url}")
        next_url = urljoin(url, location)
        log.debug("Redirect %d: %s -> %s", hops, url, next_url)
        url = next_url


def _stream_to_file(resp, dest_path: str) -> int:
    written = 0
    try:
        with open(dest_path, "wb") as f:
            while True:
                chunk = resp.read(_CHUNK_SIZE)
                if not chunk:
                    break
                f.write(chunk)
                written += len(chunk)
    except BaseException:
        _remove(dest_path)
        raise
    return written
