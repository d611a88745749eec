from __future__ import annotations

"""Resolve viewer URLs to the canonical embed form.

Two shapes are accepted: the public document page
(``/document/<id>/<slug>`` and its ``doc``/``presentation``/``book`` siblings)
and the embed page itself (``/embeds/<id>/content``). The embed form renders
the pages without site chrome and is what the capture pipeline drives.
"""

import re
from dataclasses import dataclass

from .error_codes import UnsupportedSource

DOCUMENT_PATTERN = re.compile(
    r"^(?P<origin>https?://[^/\s?#]+)/(?:doc|document|presentation|book)/(?P<id>[A-Za-z0-9_-]+)(?:/[^\s]*)?$",
    re.IGNORECASE,
)
EMBED_PATTERN = re.compile(
    r"^(?P<origin>https?://[^/\s?#]+)/embeds/(?P<id>[A-Za-z0-9_-]+)/content/?(?:\?[^\s]*)?$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class ResolvedSource:
    embed_url: str
    source_id: str


def embed_url_for(origin: str, source_id: str) -> str:
    """Return the canonical embed URL for ``source_id`` on ``origin``."""

    return f"{origin}/embeds/{source_id}/content"


def resolve_source_url(url: str | None) -> ResolvedSource:
    """Return the embed URL and source id for ``url``.

    Raises ``UnsupportedSource`` for any other shape; no network access is
    attempted here.
    """

    raw = (url or "").strip()

    match = EMBED_PATTERN.match(raw)
    if match:
        return ResolvedSource(embed_url=raw, source_id=match.group("id"))

    match = DOCUMENT_PATTERN.match(raw)
    if match:
        return ResolvedSource(
            embed_url=embed_url_for(match.group("origin"), match.group("id")),
            source_id=match.group("id"),
        )

    raise UnsupportedSource(raw)


__all__ = ["ResolvedSource", "resolve_source_url", "embed_url_for", "EMBED_PATTERN", "DOCUMENT_PATTERN"]
