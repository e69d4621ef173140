"""Model hooks applied to payloads entering and leaving the transport."""

import copy
from collections.abc import Mapping
from typing import Any, Callable


class ApiModel:
    """Base class for endpoint models. Both hooks are optional no-ops."""

    def after_load(self):
        """Post-process an object freshly populated from a response."""

    def before_save(self):
        """Pre-process a copy of an object about to be sent."""


def _noop(model):
    pass


def _call_after_load(model):
    model.after_load()


def _maybe_after_load(model):
    hook = getattr(model, "after_load", None)
    if callable(hook):
        hook()


class ModelHooks:
    """Builds model instances from payloads for one factory.

    When the factory is a class, whether its instances have an ``after_load``
    hook is decided once here. Other callables are checked per instance.
    """

    def __init__(self, factory: Callable[[], Any]):
        self.factory = factory
        if isinstance(factory, type):
            self._after_load = _call_after_load if callable(getattr(factory, "after_load", None)) else _noop
        else:
            self._after_load = _maybe_after_load

    def instantiate(self, data) -> Any:
        model = self.factory()
        populate(model, data)
        self._after_load(model)
        return model

    def load(self, data):
        if isinstance(data, list):
            return [self.instantiate(item) for item in data]
        return self.instantiate(data)


def populate(model, data):
    """Copy every field of a mapping payload onto ``model`` as attributes.

    Payloads that are not mappings leave the instance untouched.
    """
    if not isinstance(data, Mapping):
        return model
    for key, value in data.items():
        setattr(model, key, value)
    return model


def prepare_for_save(data):
    """Return a deep copy of ``data`` with its ``before_save`` hook applied."""
    model = copy.deepcopy(data)
    hook = getattr(model, "before_save", None)
    if model is not None and callable(hook):
        hook()
    return model


def to_payload(obj):
    """Convert models (and containers of them) into JSON-ready values.

    Attributes starting with ``_`` are private to the client and never sent.
    """
    if isinstance(obj, dict):
        return {k: to_payload(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_payload(v) for v in obj]
    if hasattr(obj, "__dict__") and not isinstance(obj, type):
        return {k: to_payload(v) for k, v in vars(obj).items() if not k.startswith("_")}
    return obj
