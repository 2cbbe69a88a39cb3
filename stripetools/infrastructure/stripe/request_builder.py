"""Encodes resource operation parameters into wire-ready HTTP requests.

Stripe expects form encoding everywhere: a query string for GET and DELETE,
an application/x-www-form-urlencoded body for POST. Structured values use
bracket notation (recurring[interval], items[0][price]) instead of nesting.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple
from urllib.parse import urlencode

from stripetools.domain.models.common import ApiPath, HttpMethod, PendingRequest, RequestParams

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
QUERY_METHODS = ("GET", "DELETE")


@dataclass(frozen=True)
class PreparedRequest:
    """A request ready to be handed to the HTTP transport."""
    method: HttpMethod
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    content: Optional[str] = None


def stringify(value: Any) -> str:
    """Converts a scalar parameter to its form representation."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def flatten_params(params: RequestParams, prefix: Optional[str] = None) -> Iterator[Tuple[str, str]]:
    """Yields (key, value) pairs, skipping absent values and expanding nested ones.

    {"recurring": {"interval": "month"}} -> ("recurring[interval]", "month")
    {"items": [{"price": "price_1"}]} -> ("items[0][price]", "price_1")
    """
    for key, value in params.items():
        name = f"{prefix}[{key}]" if prefix is not None else str(key)
        if value is None:
            continue
        if isinstance(value, dict):
            yield from flatten_params(value, prefix=name)
        elif isinstance(value, (list, tuple)):
            yield from flatten_params({str(index): item for index, item in enumerate(value)}, prefix=name)
        else:
            yield name, stringify(value)


class RequestBuilder:
    """Builds PreparedRequests carrying the bearer credential."""

    def __init__(self, secret_key: str, base_url: str):
        self._secret_key = secret_key
        self.base_url = base_url.rstrip("/")

    def encode(self, params: Optional[RequestParams]) -> str:
        pairs: List[Tuple[str, str]] = list(flatten_params(params or {}))
        return urlencode(pairs)

    def build(self, method: str, path: str, params: Optional[RequestParams] = None) -> PreparedRequest:
        pending = PendingRequest(method=HttpMethod(method.upper()), path=ApiPath(path), params=params)
        return self.prepare(pending)

    def prepare(self, pending: PendingRequest) -> PreparedRequest:
        headers = {"Authorization": f"Bearer {self._secret_key}"}
        url = f"{self.base_url}{pending.path}"
        encoded = self.encode(pending.params)
        logger.debug(f"Prepared {pending.method} {pending.path} ({len(encoded)} bytes of parameters)")

        if pending.method in QUERY_METHODS:
            if encoded:
                url = f"{url}?{encoded}"
            return PreparedRequest(method=pending.method, url=url, headers=headers)

        headers["Content-Type"] = FORM_CONTENT_TYPE
        return PreparedRequest(method=pending.method, url=url, headers=headers, content=encoded)
