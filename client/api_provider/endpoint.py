import functools
import logging
from concurrent.futures import Future
from typing import Any, Callable

from .endpoint_config import ActionSpec, EndpointConfig
from .models import ModelHooks, prepare_for_save

log = logging.getLogger(__name__)

# Called as resource_factory(url_template, default_params, actions)
ResourceFactoryFn = Callable[[str, dict, dict[str, ActionSpec]], Any]


def _failed(exc: BaseException) -> Future:
    future: Future = Future()
    future.set_exception(exc)
    return future


def _chain(future: Future, fn: Callable[[Any], Any]) -> Future:
    """Return a future resolved with ``fn(result)`` once ``future`` succeeds.

    Cancelling the returned future cancels ``future`` too.
    """
    chained: Future = Future()

    def _done(src: Future):
        if chained.done():
            return
        if src.cancelled():
            chained.cancel()
            return
        exc = src.exception()
        if exc is not None:
            chained.set_exception(exc)
            return
        try:
            chained.set_result(fn(src.result()))
        except Exception as e:
            chained.set_exception(e)

    def _cancel_source(dst: Future):
        if dst.cancelled():
            future.cancel()

    chained.add_done_callback(_cancel_source)
    future.add_done_callback(_done)
    return chained


class Endpoint:
    """A routed collection of callable actions built from an EndpointConfig.

    Every action is reachable as ``endpoint.call(name, params, data)`` and as
    ``endpoint.<name>(params, data)``. Each returns a Future.
    """

    def __init__(self, base_route: str, config: EndpointConfig, resource_factory: ResourceFactoryFn):
        self.config = config
        self.name = config.name
        self.resource = resource_factory(base_route + (config.route_template or ""), {}, config.actions)
        self.actions: dict[str, Callable[..., Future]] = {}

        # The strategy for each action is fixed here, not re-decided per call
        for action_name, action in config.actions.items():
            hooks = self._model_hooks(action)
            method = action.effective_method
            if hooks is not None and method == "GET":
                bound = functools.partial(self._get_request_with_model, action_name, hooks)
            elif hooks is not None and method in ("PUT", "POST"):
                bound = functools.partial(self._save_request_with_model, action_name)
            else:
                bound = functools.partial(self.request, action_name)
            self.actions[action_name] = bound

        log.debug("[%s] Endpoint ready with actions: %s", self.name, ", ".join(self.actions))

    def _model_hooks(self, action: ActionSpec) -> ModelHooks | None:
        model = action.options.get("model", True)
        if model is False or model is None:
            return None
        factory = model if callable(model) else self.config.model_factory
        if factory is None:
            return None
        return ModelHooks(factory)

    def __getattr__(self, name: str):
        actions = self.__dict__.get("actions") or {}
        if name in actions:
            return actions[name]
        raise AttributeError(f"{type(self).__name__} {self.__dict__.get('name')!r} has no action {name!r}")

    def call(self, action: str, params: dict | None = None, data=None) -> Future:
        return self.actions[action](params, data)

    def request(self, action: str, params: dict | None = None, data=None) -> Future:
        """Perform a plain request; the transport's future is returned as is."""
        return self.resource.action(action)(params, data)

    def _get_request_with_model(self, action: str, hooks: ModelHooks, params: dict | None = None, data=None) -> Future:
        """GET, then replace the response data with model instance(s)."""

        def _wrap(response):
            response.data = hooks.load(response.data)
            return response

        return _chain(self.request(action, params, data), _wrap)

    def _save_request_with_model(self, action: str, params: dict | None = None, data=None) -> Future:
        """PUT/POST a copy of ``data`` after running its ``before_save`` hook.

        The caller's object is never modified.
        """
        try:
            model = prepare_for_save(data)
        except Exception as e:
            log.debug("[%s] before_save failed for %r", self.name, action, exc_info=True)
            return _failed(e)
        return self.request(action, params, model)

    def __repr__(self):
        return f"<Endpoint {self.name!r} {sorted(self.actions)}>"
