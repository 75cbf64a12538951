import threading
import types

import pytest

from dependable import (
    ChainFrozenError,
    DependencyError,
    DependencyNotFound,
    Injectable,
    ProviderModule,
    look_in_modules,
)


class Logger:
    def __init__(self, name):
        self.name = name


L = Logger("L")
L2 = Logger("L2")


class Service:
    def __init__(self, logger):
        self.logger = logger


class Reporter:
    def __init__(self, logger, destination):
        self.logger = logger
        self.destination = destination


@pytest.fixture
def host_class():
    class App(Injectable):
        pass

    App.look_in_modules({"logger": L})
    return App


def test_inject_resolves_from_search_modules(host_class):
    service = host_class().inject(Service)

    assert isinstance(service, Service)
    assert service.logger is L


def test_inject_prefers_overrides(host_class):
    service = host_class().inject(Service, {"logger": L2})

    assert service.logger is L2


def test_inject_accepts_keyword_overrides(host_class):
    reporter = host_class().inject(Reporter, {"logger": L2}, destination="stdout")

    assert reporter.logger is L2
    assert reporter.destination == "stdout"


def test_inject_with_empty_chain_raises():
    class Empty(Injectable):
        pass

    with pytest.raises(DependencyNotFound) as excinfo:
        Empty().inject(Service)

    assert excinfo.value.name == "logger"
    assert excinfo.value.target_type is Service
    assert excinfo.value.requesting_type is Empty


def test_overrides_do_not_leak_between_calls(host_class):
    app = host_class()

    app.inject(Service, logger=L2)

    assert app.inject(Service).logger is L
    assert app.get("logger") is L


def test_get_and_resolvable(host_class):
    app = host_class()

    assert app.get("logger") is L
    assert app.resolvable("logger")
    assert not app.resolvable("mailer")
    with pytest.raises(DependencyNotFound, match="'mailer' not found"):
        app.get("mailer")


def test_dependencies_view(host_class):
    app = host_class()

    assert app.dependencies.logger is L
    assert app.dependencies["logger"] is L
    assert "logger" in app.dependencies
    assert "mailer" not in app.dependencies
    with pytest.raises(DependencyNotFound):
        app.dependencies.mailer


def test_capability_queries_do_not_build_values():
    providers = ProviderModule()
    built = []

    @providers.provides()
    def make_logger():
        built.append(1)
        return Logger("built")

    class App(Injectable):
        pass

    App.look_in_modules(providers)
    app = App()

    assert "logger" in app.dependencies
    assert app.resolvable("logger")
    assert built == []

    assert app.get("logger").name == "built"
    assert built == [1]


def test_modules_are_searched_in_declaration_order():
    settings = types.SimpleNamespace(logger=L2, destination="file")

    class App(Injectable):
        pass

    App.look_in_modules({"logger": L})
    App.look_in_modules(settings)

    reporter = App().inject(Reporter)

    assert reporter.logger is L
    assert reporter.destination == "file"


def test_decorator_declares_search_modules():
    @look_in_modules({"logger": L}, {"destination": "stderr"})
    class App(Injectable):
        pass

    reporter = App().inject(Reporter)

    assert (reporter.logger, reporter.destination) == (L, "stderr")


def test_decorator_rejects_non_injectable_classes():
    with pytest.raises(DependencyError, match="is not an Injectable class"):
        @look_in_modules({"logger": L})
        class Plain:
            pass


def test_chain_is_shared_by_instances(host_class):
    first = host_class()
    second = host_class()

    assert first.get("logger") is second.get("logger")
    assert host_class.search_chain() is host_class.search_chain()


def test_chain_is_frozen_after_first_resolution(host_class):
    host_class().get("logger")

    with pytest.raises(ChainFrozenError):
        host_class.look_in_modules({"mailer": "M"})


def test_subclass_modules_shadow_base_modules(host_class):
    class Child(host_class):
        pass

    Child.look_in_modules({"logger": L2, "destination": "child"})

    assert Child().inject(Reporter).logger is L2
    assert host_class().get("logger") is L
    assert not host_class().resolvable("destination")


def test_subclass_without_modules_uses_base_chain(host_class):
    class Child(host_class):
        pass

    assert Child().get("logger") is L
    assert Child.search_chain() is not host_class.search_chain()


def test_inject_does_not_modify_host(host_class):
    app = host_class()
    app.get("logger")
    before = dict(vars(app))

    app.inject(Service, logger=L2)

    assert vars(app) == before


def test_auto_resolver_is_built_once_under_contention(host_class):
    app = host_class()
    resolvers = []
    barrier = threading.Barrier(8)

    def resolve():
        barrier.wait()
        resolvers.append(app._auto_resolver())

    threads = [threading.Thread(target=resolve) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(resolvers) == 8
    assert all(resolver is resolvers[0] for resolver in resolvers)


def test_inject_builds_callables(host_class):
    def make_greeting(logger, greeting="hello"):
        return f"{greeting} from {logger.name}"

    assert host_class().inject(make_greeting) == "hello from L"
