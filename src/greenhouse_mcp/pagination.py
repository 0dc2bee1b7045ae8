"""Page request variants and query/Link-header helpers for Harvest pagination.

The Harvest API paginates in two mutually exclusive ways. The first page of a
listing is requested with filter parameters; every following page is
requested with the opaque ``cursor`` taken from the ``rel="next"`` entry of the
``Link`` response header, and that cursor must be the only query parameter.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Sequence, Union
from urllib.parse import parse_qs, urlencode, urlsplit

import requests

from .exceptions import PageRequestError

Scalar = Union[str, int, float, bool, None]
ParamValue = Union[Scalar, Sequence[Scalar]]


@dataclass(frozen=True, slots=True)
class Filtered:
    """First-page request carrying a flat bag of filter parameters."""

    params: Mapping[str, ParamValue] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Cursored:
    """Continuation request; the cursor is its only query parameter."""

    cursor: str

    def __post_init__(self) -> None:
        if not self.cursor:
            raise PageRequestError("cursor must be a non-empty string")


PageRequest = Union[Filtered, Cursored]


def page_request(params: Optional[Mapping[str, ParamValue]] = None, cursor: Optional[str] = None) -> PageRequest:
    """Pick the pagination mode for a call.

    A cursor combined with any other non-empty parameter is rejected instead
    of being silently dropped.
    """

    if not cursor:
        return Filtered(dict(params or {}))

    extra = sorted(clean_params(params or {}))
    if extra:
        raise PageRequestError(
            "cursor must be the only query parameter; remove: " + ", ".join(extra)
        )
    return Cursored(cursor)


def stringify(value: ParamValue) -> str:
    """Render one query value; lists and tuples become comma-separated."""

    if isinstance(value, (list, tuple)):
        return ",".join(_scalar_text(item) for item in value if item is not None)
    return _scalar_text(value)


def _scalar_text(value: Scalar) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if not isinstance(value, (str, int, float)):
        raise PageRequestError(f"unsupported query parameter value: {value!r}")
    return str(value)


def clean_params(params: Mapping[str, ParamValue]) -> Dict[str, str]:
    """Drop ``None``, empty-string and empty-list values and stringify the rest."""

    cleaned = {}
    for key, value in params.items():
        if value is None:
            continue
        text = stringify(value)
        if text:
            cleaned[key] = text
    return cleaned


def build_url(base_url: str, path: str, params: Optional[Mapping[str, ParamValue]] = None) -> str:
    url = f"{base_url.rstrip('/')}/{path.lstrip('/')}"
    if params:
        query = clean_params(params)
        if query:
            url = f"{url}?{urlencode(query)}"
    return url


def next_cursor(response: requests.Response) -> Optional[str]:
    """Return the ``cursor`` of the ``rel="next"`` Link entry, if any."""

    link = response.links.get("next")
    if not link or not link.get("url"):
        return None
    values = parse_qs(urlsplit(link["url"]).query).get("cursor")
    return values[0] if values else None


__all__ = [
    "Cursored",
    "Filtered",
    "PageRequest",
    "ParamValue",
    "build_url",
    "clean_params",
    "next_cursor",
    "page_request",
    "stringify",
]
