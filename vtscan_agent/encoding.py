from __future__ import annotations

import base64


def url_id(url: str) -> str:
    """Return the upstream resource identifier for a URL.

    This is the unpadded URL-safe base64 of the UTF-8 bytes, which is how
    the /urls/{id} endpoint addresses a URL's report.
    """
    return base64.urlsafe_b64encode(url.encode("utf-8")).decode("ascii").rstrip("=")
