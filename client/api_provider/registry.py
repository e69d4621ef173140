import logging
import threading
from collections.abc import Mapping
from typing import Iterator

from .config import cfg
from .endpoint import Endpoint, ResourceFactoryFn
from .endpoint_config import ConfigurationError, EndpointConfig
from .transport import ResourceFactory

log = logging.getLogger(__name__)


class Api(Mapping):
    """Read-only mapping of endpoint name to Endpoint, also reachable as attributes.

    Mapping methods win over attribute lookup: endpoints named ``get``, ``items``,
    ``keys`` or ``values`` are only reachable as ``api["items"]``.
    """

    def __init__(self, endpoints: dict[str, Endpoint]):
        self._endpoints = dict(endpoints)

    def __getitem__(self, name: str) -> Endpoint:
        return self._endpoints[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._endpoints)

    def __len__(self) -> int:
        return len(self._endpoints)

    def __getattr__(self, name: str) -> Endpoint:
        endpoints = self.__dict__.get("_endpoints") or {}
        if name in endpoints:
            return endpoints[name]
        raise AttributeError(f"No endpoint named {name!r}")

    def __repr__(self):
        return f"<Api {sorted(self._endpoints)}>"


class ApiRegistry:
    """Collects endpoint configurations and materializes them into an Api.

    The registry starts out configurable. The first ``get()`` builds every
    endpoint and freezes the registry; later calls return the same Api.
    """

    def __init__(
        self,
        base_route: str | None = None,
        resource_factory: ResourceFactoryFn | None = None,
        strict: bool | None = None,
    ):
        self.base_route = cfg.API_BASE_ROUTE if base_route is None else base_route
        self.strict = cfg.API_STRICT if strict is None else strict
        self.endpoints: dict[str, EndpointConfig] = {}
        self._resource_factory = resource_factory
        self._owns_factory = resource_factory is None
        self._api: Api | None = None
        self._lock = threading.Lock()

    @property
    def materialized(self) -> bool:
        return self._api is not None

    def _check_configuring(self):
        if self._api is not None:
            raise ConfigurationError("Registry is already materialized")

    def set_base_route(self, route: str):
        self._check_configuring()
        self.base_route = route

    def endpoint(self, name: str) -> EndpointConfig:
        """Return the config for ``name``, creating it on first use."""
        self._check_configuring()
        if name not in self.endpoints:
            self.endpoints[name] = EndpointConfig(name)
        return self.endpoints[name]

    def names(self) -> list[str]:
        return list(self.endpoints)

    def close(self):
        """Close the transport if this registry created it."""
        if self._owns_factory and self._resource_factory is not None:
            self._resource_factory.close()
            self._resource_factory = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False

    def get(self) -> Api:
        with self._lock:
            if self._api is None:
                self._api = self._materialize()
            return self._api

    def _materialize(self) -> Api:
        for config in self.endpoints.values():
            config.validate(strict=self.strict)

        if self._resource_factory is None:
            self._resource_factory = ResourceFactory()

        built = {}
        for name, config in self.endpoints.items():
            config.freeze()
            built[name] = Endpoint(self.base_route, config, self._resource_factory)
        log.info("Materialized %d endpoint(s) under %r", len(built), self.base_route)
        return Api(built)
