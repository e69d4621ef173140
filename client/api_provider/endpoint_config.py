import logging
from dataclasses import dataclass, field
from typing import Any, Callable

log = logging.getLogger(__name__)

# HTTP method -> action name, seeded into every endpoint
DEFAULT_ACTIONS = {
    "GET": "get",
    "PUT": "update",
    "POST": "save",
    "PATCH": "patch",
    "DELETE": "remove",
}


class ConfigurationError(Exception):
    pass


@dataclass
class ActionSpec:
    method: str | None = None
    params: dict[str, Any] | None = None
    is_array: bool = False
    options: dict[str, Any] = field(default_factory=dict)

    @property
    def effective_method(self) -> str:
        """The HTTP method actually sent; unset methods go out as GET."""
        return self.method or "GET"


class EndpointConfig:
    """Fluent builder describing one endpoint: route, model and actions."""

    def __init__(self, name: str = ""):
        self.name = name
        self.route_template: str | None = None
        self.model_factory: Callable[[], Any] | None = None
        self.actions: dict[str, ActionSpec] = {}
        self._frozen = False

        for method, alias in DEFAULT_ACTIONS.items():
            self.add_http_action(method, alias)

    def _check_mutable(self):
        if self._frozen:
            raise ConfigurationError(f"Endpoint {self.name!r} is already materialized and cannot be changed")

    def route(self, template: str) -> "EndpointConfig":
        """Set the route for this endpoint, relative to the base route."""
        self._check_mutable()
        self.route_template = template
        return self

    def model(self, factory: Callable[[], Any]) -> "EndpointConfig":
        """Set the zero-argument factory used to build model objects."""
        self._check_mutable()
        self.model_factory = factory
        return self

    def add_http_action(
        self,
        method: str,
        name: str,
        params: dict[str, Any] | None = None,
        options: dict[str, Any] | None = None,
    ) -> "EndpointConfig":
        """Add or replace an action.

        Args:
            method: HTTP method, upper-cased on insert.
            name: Action name; an existing action with this name is replaced whole.
            params: Default parameters for the action.
            options: Extra per-action options (``url``, ``headers``, ``model``,
                ``is_array``).
        """
        self._check_mutable()
        opts = dict(options or {})
        is_array = bool(opts.pop("is_array", False))
        if name in self.actions and name in DEFAULT_ACTIONS.values():
            log.debug("[%s] Overriding default action %r", self.name, name)
        self.actions[name] = ActionSpec(method=method.upper(), params=params, is_array=is_array, options=opts)
        return self

    def enable_query(self, name: str = "query") -> "EndpointConfig":
        """Mark an action as returning a list, creating it if needed."""
        self._check_mutable()
        action = self.actions.setdefault(name, ActionSpec())
        action.is_array = True
        return self

    def freeze(self):
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def validate(self, strict: bool = False) -> list[str]:
        """Check the configuration for problems that would otherwise fail at call time.

        Strict mode raises ConfigurationError on the first report; lenient mode
        logs each problem and returns them.
        """
        problems = []
        if not self.route_template:
            problems.append("no route configured")
        for action_name, action in self.actions.items():
            if action.options.get("model") is True and self.model_factory is None:
                problems.append(f"action {action_name!r} requires a model but none is configured")

        if problems and strict:
            raise ConfigurationError(f"Endpoint {self.name!r}: " + "; ".join(problems))
        for problem in problems:
            log.warning("[%s] %s", self.name, problem)
        return problems
