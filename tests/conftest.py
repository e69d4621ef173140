from concurrent.futures import Future

import pytest
from api_provider.models import ApiModel
from api_provider.registry import ApiRegistry
from api_provider.transport import Response


class FakeResource:
    """Stands in for HttpResource: records calls and resolves immediately."""

    def __init__(self, url_template, default_params, actions):
        self.url_template = url_template
        self.default_params = default_params
        self.actions = actions
        self.calls = []
        self.payload = None
        self.error = None

    def action(self, name):
        def _call(params=None, data=None):
            self.calls.append((name, params, data))
            future = Future()
            if self.error is not None:
                future.set_exception(self.error)
            else:
                future.set_result(Response(data=self.payload, status=200, method=self.actions[name].effective_method))
            return future

        return _call


class FakeResourceFactory:
    def __init__(self):
        self.resources = []

    def __call__(self, url_template, default_params, actions):
        resource = FakeResource(url_template, default_params, actions)
        self.resources.append(resource)
        return resource


class Song(ApiModel):
    def __init__(self):
        self.loaded = 0
        self.saved = 0

    def after_load(self):
        self.loaded += 1

    def before_save(self):
        self.saved += 1
        self.name = self.name.upper()


@pytest.fixture
def resource_factory():
    return FakeResourceFactory()


@pytest.fixture
def registry(resource_factory):
    reg = ApiRegistry(base_route="/api", resource_factory=resource_factory, strict=False)
    reg.endpoint("songs").route("/songs/:id").model(Song).enable_query()
    reg.endpoint("albums").route("/albums/:id").add_http_action("GET", "tracks", {"id": "@id"})
    return reg


@pytest.fixture
def song_model():
    return Song
