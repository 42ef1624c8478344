"""
Identity provider redirect helpers.
"""

from __future__ import annotations

from urllib.parse import parse_qs, urlencode, urlsplit


def build_authorize_url(
    authorize_url: str, client_id: str, redirect_uri: str, nonce: str
) -> str:
    """Build the provider URL that returns an id_token bound to ``nonce``."""
    query = urlencode(
        {
            "client_id": client_id,
            "response_type": "id_token",
            "redirect_uri": redirect_uri,
            "scope": "openid",
            "nonce": nonce,
        }
    )
    return f"{authorize_url}?{query}"


def parse_callback_fragment(url_or_fragment: str) -> str | None:
    """Extract ``id_token`` from a redirect URL or its bare fragment."""
    fragment = url_or_fragment
    if "#" in url_or_fragment:
        fragment = urlsplit(url_or_fragment).fragment
    tokens = parse_qs(fragment.lstrip("#")).get("id_token")
    return tokens[0] if tokens else None
