from __future__ import annotations

import re

_DRIVE_FILE_RE = re.compile(r"/d/([^/?#]+)")


def normalize_asset_url(url: str) -> str:
    """Turn a Google Drive share link into a direct view link.

    Any other URL is returned unchanged.
    """

    value = (url or "").strip()
    if not value:
        return ""
    if "drive.google.com" in value and "/d/" in value:
        m = _DRIVE_FILE_RE.search(value)
        if m:
            return f"https://drive.google.com/uc?export=view&id={m.group(1)}"
    return value
