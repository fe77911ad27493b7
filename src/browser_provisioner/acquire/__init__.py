"""acquire — sources that put a Chromium build into the project cache."""
from .integrity import compute_sha256, digests_match, verify_sha256, read_expected_sha256  # noqa: F401
from .extract import extract_zip, install_extracted  # noqa: F401
from .download import download_file  # noqa: F401
from .release_cache import try_release_cache, read_chromium_revision, build_asset_urls  # noqa: F401
from .bundled import try_bundled_install  # noqa: F401
