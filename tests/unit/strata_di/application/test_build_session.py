"""Unit tests for BuildSession."""

import pytest

from strata_di.application.build_session import BuildSession
from strata_di.application.instances import ConstructorInstance, LambdaInstance, ObjectInstance
from strata_di.application.interceptor_chain import InterceptorChain
from strata_di.application.registry import Registry
from strata_di.domain import (
    CircularDependencyError,
    ConstructionError,
    ContainerSettings,
    ExplicitArguments,
    InstanceKey,
    Lifecycle,
    UnresolvableContractError,
)


class Config:
    pass


class Repository:
    def __init__(self, config: Config):
        self.config = config


class Service:
    def __init__(self, repository: Repository, config: Config):
        self.repository = repository
        self.config = config


class Probe:
    """Records the build context seen by a recipe."""

    def __init__(self, root_type, parent_type, current_type, path):
        self.root_type = root_type
        self.parent_type = parent_type
        self.current_type = current_type
        self.path = path


def probe_builder(c):
    return Probe(c.root_type, c.parent_type, c.current_type, c.resolution_path)


@pytest.fixture
def registry():
    return Registry(ContainerSettings(auto_wire=False))


def make_session(registry, explicit_arguments=None, **settings):
    return BuildSession(registry, InterceptorChain(), explicit_arguments, ContainerSettings(auto_wire=False, **settings))


class TestGetInstance:
    """Test cases for BuildSession.get_instance."""

    def test_resolves_nested_graph(self, registry):
        """Test that nested dependencies are resolved through the session."""
        registry.add(Config, ConstructorInstance(Config))
        registry.add(Repository, ConstructorInstance(Repository))
        registry.add(Service, ConstructorInstance(Service))

        service = make_session(registry).get_instance(Service)

        assert isinstance(service.repository, Repository)
        assert service.repository.config is service.config

    def test_unique_lifecycle_builds_every_time(self, registry):
        """Test that unique recipes give distinct objects within one session."""
        registry.add(Config, ConstructorInstance(Config, lifecycle=Lifecycle.UNIQUE))
        session = make_session(registry)

        assert session.get_instance(Config) is not session.get_instance(Config)

    def test_session_lifecycle_caches(self, registry):
        """Test that session recipes give one object per session."""
        registry.add(Config, ConstructorInstance(Config, lifecycle=Lifecycle.SESSION))
        session = make_session(registry)

        assert session.get_instance(Config) is session.get_instance(Config)
        assert make_session(registry).get_instance(Config) is not session.get_instance(Config)

    def test_default_lifecycle_from_settings(self, registry):
        """Test that recipes without a lifecycle use the configured default."""
        registry.add(Config, ConstructorInstance(Config))
        session = make_session(registry, default_lifecycle=Lifecycle.UNIQUE)

        assert session.get_instance(Config) is not session.get_instance(Config)

    def test_singleton_lifecycle_spans_sessions(self, registry):
        """Test that singletons are shared by every session on a registry."""
        registry.add(Config, ConstructorInstance(Config, lifecycle=Lifecycle.SINGLETON))

        assert make_session(registry).get_instance(Config) is make_session(registry).get_instance(Config)

    def test_by_name(self, registry):
        """Test that names select registrations."""
        red = Config()
        registry.add(Config, ObjectInstance(Config()))
        registry.add(Config, ObjectInstance(red, name="Red"))

        assert make_session(registry).get_instance(Config, "Red") is red

    def test_unresolvable_contract(self, registry):
        """Test the error for unregistered contracts."""
        with pytest.raises(UnresolvableContractError) as exc_info:
            make_session(registry).get_instance(Config, "Red")

        error = exc_info.value
        assert error.contract is Config
        assert error.name == "Red"
        assert error.path == [InstanceKey.of(Config, "Red")]

    def test_unresolvable_nested_dependency_reports_path(self, registry):
        """Test that nested failures carry the path from the root."""
        registry.add(Service, ConstructorInstance(Service))
        registry.add(Repository, ConstructorInstance(Repository))

        with pytest.raises(UnresolvableContractError) as exc_info:
            make_session(registry).get_instance(Service)

        assert exc_info.value.contract is Config
        assert exc_info.value.path == [
            InstanceKey.of(Service),
            InstanceKey.of(Repository),
            InstanceKey.of(Config),
        ]

    def test_construction_failure_reports_path(self, registry):
        """Test that recipe errors are tagged with the path to the failing recipe."""

        def broken(c):
            raise OSError("disk full")

        registry.add(Service, ConstructorInstance(Service))
        registry.add(Repository, ConstructorInstance(Repository))
        registry.add(Config, LambdaInstance(broken, name="from-disk"))

        with pytest.raises(ConstructionError) as exc_info:
            make_session(registry).get_instance(Service)

        error = exc_info.value
        assert error.contract is Config
        assert error.name == "from-disk"
        assert error.path[-1] == InstanceKey.of(Config, "from-disk")
        assert error.path[0] == InstanceKey.of(Service)
        assert isinstance(error.__cause__, OSError)

    def test_failed_build_is_not_cached(self, registry):
        """Test that a session can retry a failed session-scoped build."""
        attempts = []

        def flaky(c):
            attempts.append(1)
            if len(attempts) == 1:
                raise RuntimeError("first attempt fails")
            return Config()

        registry.add(Config, LambdaInstance(flaky, lifecycle=Lifecycle.SESSION))
        session = make_session(registry)

        with pytest.raises(ConstructionError):
            session.get_instance(Config)

        assert isinstance(session.get_instance(Config), Config)
        assert session.resolution_path == ()

    def test_circular_dependency(self, registry):
        """Test that cycles are reported instead of recursing."""

        class Chicken:
            pass

        class Egg:
            pass

        registry.add(Chicken, LambdaInstance(lambda c: c.resolve(Egg)))
        registry.add(Egg, LambdaInstance(lambda c: c.resolve(Chicken)))

        with pytest.raises(CircularDependencyError) as exc_info:
            make_session(registry).get_instance(Chicken)

        assert exc_info.value.dependency_chain == [
            InstanceKey.of(Chicken),
            InstanceKey.of(Egg),
            InstanceKey.of(Chicken),
        ]

    def test_max_depth(self, registry):
        """Test that deep graphs are cut off at max_depth."""
        registry.add(Service, ConstructorInstance(Service))
        registry.add(Repository, ConstructorInstance(Repository))
        registry.add(Config, ConstructorInstance(Config))

        with pytest.raises(ConstructionError, match="maximum resolution depth of 2"):
            make_session(registry, max_depth=2).get_instance(Service)


class TestExplicitArguments:
    """Test cases for explicit argument overrides."""

    def test_explicit_argument_short_circuits(self, registry):
        """Test that explicit values are returned without building."""
        config = Config()
        calls = []
        registry.add(Config, LambdaInstance(lambda c: calls.append(1) or Config()))

        session = make_session(registry, ExplicitArguments().set(Config, config))

        assert session.get_instance(Config) is config
        assert calls == []

    def test_explicit_argument_for_nested_dependency_only(self, registry):
        """Test that siblings of an overridden dependency resolve normally."""
        config = Config()
        registry.add(Repository, ConstructorInstance(Repository))
        registry.add(Service, ConstructorInstance(Service))

        service = make_session(registry, ExplicitArguments().set(Config, config)).get_instance(Service)

        assert service.config is config
        assert service.repository.config is config

    def test_explicit_argument_is_exact_on_name(self, registry):
        """Test that a named override does not replace the default."""
        named = Config()
        default = Config()
        registry.add(Config, ObjectInstance(default))

        session = make_session(registry, ExplicitArguments().set(Config, named, name="Red"))

        assert session.get_instance(Config) is default
        assert session.get_instance(Config, "Red") is named

    def test_explicit_argument_beats_singleton_without_touching_it(self, registry):
        """Test that explicit values win over singletons and leave the store alone."""
        registry.add(Config, ConstructorInstance(Config, lifecycle=Lifecycle.SINGLETON))
        override = Config()

        overridden = make_session(registry, ExplicitArguments().set(Config, override)).get_instance(Config)
        singleton = make_session(registry).get_instance(Config)

        assert overridden is override
        assert singleton is not override
        assert registry.singleton_count() == 1


class TestContext:
    """Test cases for root, parent and path tracking."""

    def test_top_level_context(self, registry):
        """Test the context seen by a top-level recipe."""
        registry.add(Probe, LambdaInstance(probe_builder))
        session = make_session(registry)

        probe = session.get_instance(Probe)

        assert probe.root_type is Probe
        assert probe.parent_type is None
        assert probe.current_type is Probe
        assert probe.path == (InstanceKey.of(Probe),)
        assert session.root_type is Probe

    def test_nested_context(self, registry):
        """Test that nested recipes see the root and their immediate requester."""

        class Holder:
            def __init__(self, probe: Probe):
                self.probe = probe

        class Outer:
            def __init__(self, holder: Holder):
                self.holder = holder

        registry.add(Probe, LambdaInstance(probe_builder))
        registry.add(Holder, ConstructorInstance(Holder))
        registry.add(Outer, ConstructorInstance(Outer))

        probe = make_session(registry).get_instance(Outer).holder.probe

        assert probe.root_type is Outer
        assert probe.parent_type is Holder
        assert probe.current_type is Probe
        assert probe.path == (InstanceKey.of(Outer), InstanceKey.of(Holder), InstanceKey.of(Probe))

    def test_parent_restored_after_nested_build(self, registry):
        """Test that the parent is restored after success and failure."""
        seen = []

        class Broken:
            pass

        def consumer(c):
            seen.append(("before", c.current_type, c.parent_type))
            c.resolve(Probe)
            seen.append(("after success", c.current_type, c.parent_type))
            with pytest.raises(ConstructionError):
                c.resolve(Broken)
            seen.append(("after failure", c.current_type, c.parent_type))
            return Service.__new__(Service)

        def broken(c):
            raise ValueError("nope")

        registry.add(Probe, LambdaInstance(probe_builder))
        registry.add(Broken, LambdaInstance(broken))
        registry.add(Service, LambdaInstance(consumer))
        registry.add(Repository, LambdaInstance(lambda c: c.resolve(Service)))

        session = make_session(registry)
        session.get_instance(Repository)

        assert seen == [
            ("before", Service, Repository),
            ("after success", Service, Repository),
            ("after failure", Service, Repository),
        ]
        assert session.resolution_path == ()
        assert session.parent_type is None

    def test_root_fixed_for_session(self, registry):
        """Test that the first top-level contract stays the root."""
        registry.add(Config, ConstructorInstance(Config))
        registry.add(Probe, LambdaInstance(probe_builder))
        session = make_session(registry)

        session.get_instance(Config)
        probe = session.get_instance(Probe)

        assert probe.root_type is Config

    def test_root_set_by_explicit_argument_request(self, registry):
        """Test that a request answered by an explicit argument still sets the root."""
        session = make_session(registry, ExplicitArguments().set(Config, Config()))
        session.get_instance(Config)

        assert session.root_type is Config

    def test_root_concrete_type(self, registry):
        """Test that the concrete type of the outermost recipe is reported."""
        registry.add(Repository, ConstructorInstance(Repository))
        registry.add(Config, LambdaInstance(lambda c: Config()))
        session = make_session(registry)

        session.get_instance(Repository)

        assert session.root_concrete_type is Repository


class TestGetAllInstances:
    """Test cases for BuildSession.get_all_instances."""

    def test_registration_order(self, registry):
        """Test that every recipe is built in registration order."""
        first, second, third = Config(), Config(), Config()
        registry.add(Config, ObjectInstance(first, name="z"))
        registry.add(Config, ObjectInstance(second, name="a"))
        registry.add(Config, ObjectInstance(third))

        assert make_session(registry).get_all_instances(Config) == [first, second, third]

    def test_empty(self, registry):
        """Test that an unregistered contract yields an empty list."""
        assert make_session(registry).get_all_instances(Config) == []

    def test_items_see_root_and_parent(self, registry):
        """Test the context of recipes built for get_all_instances."""

        class Holder:
            def __init__(self, probe: Probe):
                self.probe = probe

        registry.add(Probe, LambdaInstance(probe_builder, lifecycle=Lifecycle.UNIQUE))
        registry.add(Holder, ConstructorInstance(Holder, name="Red"))
        registry.add(Holder, ConstructorInstance(Holder, name="Blue"))

        holders = make_session(registry).get_all_instances(Holder)

        assert [holder.probe.root_type for holder in holders] == [Holder, Holder]
        assert [holder.probe.parent_type for holder in holders] == [Holder, Holder]
        assert holders[0].probe is not holders[1].probe
        assert holders[0].probe.path == (InstanceKey.of(Holder, "Red"), InstanceKey.of(Probe))


class TestTryGetInstanceAndLazy:
    """Test cases for try_get_instance, build_instance and create_lazy."""

    def test_try_get_instance_missing(self, registry):
        """Test that missing registrations give None."""
        assert make_session(registry).try_get_instance(Config) is None

    def test_try_get_instance_explicit(self, registry):
        """Test that explicit arguments are honored."""
        config = Config()
        session = make_session(registry, ExplicitArguments().set(Config, config))
        assert session.try_get_instance(Config) is config

    def test_try_get_instance_still_raises_build_errors(self, registry):
        """Test that build failures are not hidden."""
        registry.add(Repository, ConstructorInstance(Repository))

        with pytest.raises(UnresolvableContractError):
            make_session(registry).try_get_instance(Repository)

    def test_build_instance_for_supplied_recipe(self, registry):
        """Test building a recipe that is not registered."""
        registry.add(Config, ConstructorInstance(Config))
        session = make_session(registry)

        repository = session.build_instance(Repository, ConstructorInstance(Repository))

        assert isinstance(repository.config, Config)
        assert session.root_type is Repository
        assert session.root_concrete_type is Repository

    def test_lazy_resolves_at_call_time(self, registry):
        """Test that the lazy factory resolves when called, not when created."""
        session = make_session(registry)
        lazy = session.create_lazy(Config)

        registry.add(Config, ConstructorInstance(Config, lifecycle=Lifecycle.UNIQUE))

        assert isinstance(lazy(), Config)
        assert lazy() is not lazy()

    def test_lazy_uses_call_time_context(self, registry):
        """Test that a lazy factory called inside a build sees that build's context."""

        class LazyConsumer:
            def __init__(self, factory):
                self.probe = factory()

        registry.add(Probe, LambdaInstance(probe_builder))
        session = make_session(registry)
        registry.add(LazyConsumer, LambdaInstance(lambda c: LazyConsumer(c.create_lazy(Probe))))

        probe = session.get_instance(LazyConsumer).probe

        assert probe.root_type is LazyConsumer
        assert probe.parent_type is LazyConsumer
