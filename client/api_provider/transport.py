import logging
import re
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable
from urllib.parse import quote

import requests

from .config import cfg
from .endpoint_config import ActionSpec
from .models import to_payload

log = logging.getLogger(__name__)

# Methods that carry a request body
BODY_METHODS = ("POST", "PUT", "PATCH")

# ":name" placeholders; a leading letter keeps ports like ":8080" out
_PLACEHOLDER = re.compile(r":([A-Za-z_]\w*)")


class ResponseShapeError(Exception):
    def __init__(self, action: str, expected_list: bool, got: Any):
        self.action = action
        self.expected_list = expected_list
        expected = "a list" if expected_list else "an object"
        super().__init__(f"Action {action!r} expected {expected} in response, got {type(got).__name__}")


@dataclass
class Response:
    data: Any
    status: int
    headers: dict[str, str] = field(default_factory=dict)
    url: str = ""
    method: str = "GET"


def _lookup(data, path: str):
    """Resolve a dotted ``@`` parameter path against the request payload."""
    value = data
    for part in path.split("."):
        if value is None:
            return None
        if isinstance(value, dict):
            value = value.get(part)
        else:
            value = getattr(value, part, None)
    return value


def merge_params(defaults: dict | None, params: dict | None, data=None) -> dict:
    """Merge default and call params; defaults like ``"@id"`` read from ``data``."""
    merged = {}
    for key, value in (defaults or {}).items():
        if isinstance(value, str) and value.startswith("@"):
            value = _lookup(data, value[1:])
        merged[key] = value
    merged.update(params or {})
    return merged


def expand_url(template: str, params: dict) -> tuple[str, dict]:
    """Fill ``:name`` placeholders from params.

    Returns the URL and the params left over for the query string. Unfilled
    placeholders are dropped with their leading slash.
    """
    query = dict(params)
    scheme, sep, rest = template.partition("://")
    if not sep:
        scheme, rest = "", template

    def _fill(match: re.Match) -> str:
        name = match.group(1)
        value = query.pop(name, None)
        if value is None or value == "":
            return ""
        return quote(str(value), safe="")

    path = _PLACEHOLDER.sub(_fill, rest)
    path = re.sub(r"/{2,}", "/", path)
    if len(path) > 1 and path.endswith("/") and not template.endswith("/"):
        path = path.rstrip("/")
    url = f"{scheme}{sep}{path}" if sep else path
    return url, {k: v for k, v in query.items() if v is not None}


class HttpResource:
    """One routed resource; each action issues exactly one HTTP request."""

    def __init__(
        self,
        session: requests.Session,
        executor: ThreadPoolExecutor,
        url_template: str,
        default_params: dict | None,
        actions: dict[str, ActionSpec],
        timeout: float,
    ):
        self.session = session
        self.executor = executor
        self.url_template = url_template
        self.default_params = dict(default_params or {})
        self.actions = actions
        self.timeout = timeout

    def action(self, name: str) -> Callable[..., Future]:
        spec = self.actions[name]

        def _call(params: dict | None = None, data=None) -> Future:
            return self.request(name, params, data, spec=spec)

        _call.__name__ = name
        return _call

    def request(self, name: str, params: dict | None = None, data=None, spec: ActionSpec | None = None) -> Future:
        spec = spec or self.actions[name]
        return self.executor.submit(self._send, name, spec, params, data)

    def _send(self, name: str, spec: ActionSpec, params: dict | None, data) -> Response:
        method = spec.effective_method
        defaults = dict(self.default_params, **(spec.params or {}))
        merged = merge_params(defaults, params, data)
        url, query = expand_url(spec.options.get("url") or self.url_template, merged)

        kwargs: dict[str, Any] = {"params": query or None, "timeout": self.timeout}
        if spec.options.get("headers"):
            kwargs["headers"] = dict(spec.options["headers"])
        if method in BODY_METHODS and data is not None:
            kwargs["json"] = to_payload(data)

        log.debug("%s %s", method, url)
        resp = self.session.request(method, url, **kwargs)
        resp.raise_for_status()

        body = resp.json() if resp.content else None
        if body is not None and isinstance(body, list) != spec.is_array:
            raise ResponseShapeError(name, spec.is_array, body)
        return Response(data=body, status=resp.status_code, headers=dict(resp.headers), url=url, method=method)


class ResourceFactory:
    """Builds HttpResource handles sharing one session and worker pool."""

    def __init__(
        self,
        session: requests.Session | None = None,
        executor: ThreadPoolExecutor | None = None,
        timeout: float | None = None,
        token: str | None = None,
    ):
        cfg.validate()
        self.session = session or requests.Session()
        token = token if token is not None else cfg.API_TOKEN
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"
        self.executor = executor or ThreadPoolExecutor(
            max_workers=cfg.API_MAX_WORKERS, thread_name_prefix="api-provider"
        )
        self.timeout = timeout or cfg.API_TIMEOUT

    def __call__(self, url_template: str, default_params: dict | None, actions: dict[str, ActionSpec]) -> HttpResource:
        return HttpResource(self.session, self.executor, url_template, default_params, actions, self.timeout)

    def close(self):
        self.executor.shutdown(wait=True)
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False
