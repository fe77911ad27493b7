"""SHA-256 integrity checks for downloaded archives."""
import hashlib

_CHUNK_SIZE = 1024 * 1024


def compute_sha256(path: str) -> str:
    """Stream-hash *path* and return the lowercase hex digest."""
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest().lower()


def read_expected_sha256(sidecar_path: str) -> str:
    """Read the expected digest from a ``.sha256`` sidecar.

    Accepts both a bare digest and ``sha256sum`` output (``<hex>  <name>``).
    """
    with open(sidecar_path, "r", encoding="utf-8") as f:
        content = f.read().strip()
    return content.split()[0].lower() if content else ""


def digests_match(expected: str, actual: str) -> bool:
    """Exact comparison after normalizing both digests to lowercase."""
    return (expected or "").strip().lower() == (actual or "").strip().lower()


def verify_sha256(path: str, expected: str) -> bool:
    return digests_match(expected, compute_sha256(path))
