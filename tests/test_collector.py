"""
Tests for the collector (merge engine) and scope store.
"""

import pytest

from ormhub.config.schemas import ModelDefinition
from ormhub.errors import AlreadySetError, DuplicateRegistrationError, LifecycleError
from ormhub.registration import ROOT_SCOPE, Collector, ConfigNormalizer, Scope, ScopeStore


@pytest.fixture
def collector():
    return Collector()


@pytest.fixture
def scopes():
    return ScopeStore()


@pytest.fixture
def normalize():
    return ConfigNormalizer().normalize


# =============================================================================
# Merge
# =============================================================================


class TestMerge:
    def test_disjoint_fragments_union(self, collector, scopes, normalize):
        users = ROOT_SCOPE.child("users")
        catalog = ROOT_SCOPE.child("catalog")
        adapter_a, adapter_b = object(), object()

        collector.merge(
            normalize(
                {
                    "adapters": {"a": adapter_a},
                    "connections": {"one": {"adapter": "a"}},
                    "models": [{"identity": "user"}, {"identity": "session"}],
                    "defaults": {"connection": "one"},
                }
            ),
            users,
            scopes,
        )
        collector.merge(
            normalize(
                {
                    "adapters": {"b": adapter_b},
                    "connections": {"two": {"adapter": "b"}},
                    "models": [{"identity": "product"}],
                    "defaults": {"migrate": "safe"},
                }
            ),
            catalog,
            scopes,
        )

        assert collector.adapters == {"a": adapter_a, "b": adapter_b}
        assert list(collector.connections) == ["one", "two"]
        assert list(collector.models) == ["user", "session", "product"]
        assert collector.defaults == {"connection": "one", "migrate": "safe"}

    def test_returns_merged_identities(self, collector, scopes, normalize):
        identities = collector.merge(normalize([{"identity": "user"}]), ROOT_SCOPE, scopes)

        assert identities == ["user"]

    def test_models_keep_definitions(self, collector, scopes, normalize):
        collector.merge(normalize([{"identity": "user", "attributes": {"a": "string"}}]), ROOT_SCOPE, scopes)

        assert isinstance(collector.models["user"], ModelDefinition)
        assert collector.models["user"].attributes == {"a": "string"}

    def test_datastores_alias(self, collector, scopes, normalize):
        collector.merge(normalize({"connections": {"one": {"adapter": "a"}}}), ROOT_SCOPE, scopes)

        assert collector.datastores is collector.connections

    def test_summary(self, collector, scopes, normalize):
        collector.merge(normalize([{"identity": "user"}]), ROOT_SCOPE, scopes)

        assert collector.summary() == {
            "adapters": [],
            "connections": [],
            "models": ["user"],
            "defaults": [],
            "teardown_on_stop": None,
        }


class TestDuplicates:
    @pytest.mark.parametrize(
        "first,second,kind,key",
        [
            ({"adapters": {"a": 1}}, {"adapters": {"a": 2}}, "adapter", "a"),
            (
                {"connections": {"one": {"adapter": "a"}}},
                {"connections": {"one": {"adapter": "b"}}},
                "connection",
                "one",
            ),
            ({"models": [{"identity": "user"}]}, {"models": [{"identity": "user"}]}, "model", "user"),
            ({"defaults": {"migrate": "safe"}}, {"defaults": {"migrate": "drop"}}, "default", "migrate"),
        ],
    )
    def test_second_registration_fails(self, collector, scopes, normalize, first, second, kind, key):
        collector.merge(normalize(first), ROOT_SCOPE, scopes)
        before = collector.summary()

        with pytest.raises(DuplicateRegistrationError) as exc_info:
            collector.merge(normalize(second), ROOT_SCOPE.child("other"), scopes)

        assert exc_info.value.kind == kind
        assert exc_info.value.key == key
        assert key in str(exc_info.value)
        assert collector.summary() == before

    def test_first_registration_data_intact(self, collector, scopes, normalize):
        first, second = object(), object()
        collector.merge(normalize({"adapters": {"a": first}}), ROOT_SCOPE, scopes)

        with pytest.raises(DuplicateRegistrationError):
            collector.merge(normalize({"adapters": {"a": second}}), ROOT_SCOPE.child("other"), scopes)

        assert collector.adapters["a"] is first

    def test_duplicate_within_one_fragment(self, collector, scopes, normalize):
        with pytest.raises(DuplicateRegistrationError):
            collector.merge(normalize([{"identity": "user"}, {"identity": "user"}]), ROOT_SCOPE, scopes)

    def test_failed_merge_does_not_record_scope(self, collector, scopes, normalize):
        users = ROOT_SCOPE.child("users")
        collector.merge(normalize([{"identity": "user"}]), ROOT_SCOPE, scopes)

        with pytest.raises(DuplicateRegistrationError):
            collector.merge(normalize([{"identity": "user"}]), users, scopes)

        assert scopes.models_for(users) == []

    def test_no_rollback_on_partial_failure(self, collector, scopes, normalize):
        collector.merge(normalize({"connections": {"one": {"adapter": "a"}}}), ROOT_SCOPE, scopes)

        with pytest.raises(DuplicateRegistrationError):
            collector.merge(
                normalize({"adapters": {"b": 1}, "connections": {"one": {"adapter": "b"}}}),
                ROOT_SCOPE,
                scopes,
            )

        assert "b" in collector.adapters


class TestTeardownFlag:
    def test_unset_by_default(self, collector):
        assert collector.teardown_on_stop is None

    def test_set_once(self, collector):
        collector.set_teardown_on_stop(False)

        assert collector.teardown_on_stop is False

    @pytest.mark.parametrize("first,second", [(True, True), (False, False), (True, False)])
    def test_set_twice_fails(self, collector, first, second):
        collector.set_teardown_on_stop(first)

        with pytest.raises(AlreadySetError):
            collector.set_teardown_on_stop(second)

        assert collector.teardown_on_stop is first


class TestFreeze:
    def test_merge_after_freeze(self, collector, scopes, normalize):
        collector.freeze()

        with pytest.raises(LifecycleError):
            collector.merge(normalize([{"identity": "user"}]), ROOT_SCOPE, scopes)

    def test_teardown_flag_after_freeze(self, collector):
        collector.freeze()

        with pytest.raises(LifecycleError):
            collector.set_teardown_on_stop(False)


# =============================================================================
# Scopes
# =============================================================================


class TestScope:
    def test_path(self):
        assert ROOT_SCOPE.child("users").child("admin").path == "root/users/admin"

    def test_equality_and_hash(self):
        assert ROOT_SCOPE.child("users") == Scope("users", parent=ROOT_SCOPE)
        assert len({ROOT_SCOPE.child("users"), ROOT_SCOPE.child("users")}) == 1

    def test_is_within(self):
        admin = ROOT_SCOPE.child("users").child("admin")

        assert admin.is_within(ROOT_SCOPE.child("users"))
        assert admin.is_within(admin)
        assert not ROOT_SCOPE.child("users").is_within(admin)

    @pytest.mark.parametrize("name", ["", "a/b"])
    def test_invalid_name(self, name):
        with pytest.raises(ValueError):
            Scope(name)


class TestScopeStore:
    def test_coerce(self, scopes):
        assert scopes.coerce(None) == ROOT_SCOPE
        assert scopes.coerce("users") == ROOT_SCOPE.child("users")
        assert scopes.coerce("users/admin") == ROOT_SCOPE.child("users").child("admin")

        explicit = Scope("other")
        assert scopes.coerce(explicit) is explicit

    def test_coerce_full_path(self, scopes):
        admin = ROOT_SCOPE.child("users").child("admin")

        assert scopes.coerce(admin.path) == admin
        assert scopes.coerce(str(admin)) == admin
        assert scopes.coerce(ROOT_SCOPE.path) == ROOT_SCOPE
        assert scopes.coerce("/root/users/") == ROOT_SCOPE.child("users")

    def test_records_are_created_lazily(self, scopes):
        users = ROOT_SCOPE.child("users")

        assert users not in scopes
        scopes.record(users, ["user"])
        assert users in scopes
        assert len(scopes) == 1

    def test_records_are_cumulative(self, scopes):
        users = ROOT_SCOPE.child("users")
        scopes.record(users, ["user"])
        scopes.record(users, ["session"])

        assert scopes.models_for(users) == ["user", "session"]

    def test_unknown_scope_is_empty(self, scopes):
        assert scopes.models_for(ROOT_SCOPE.child("nobody")) == []

    def test_include_descendants(self, scopes):
        users = ROOT_SCOPE.child("users")
        scopes.record(users, ["user"])
        scopes.record(users.child("admin"), ["role"])
        scopes.record(ROOT_SCOPE.child("catalog"), ["product"])

        assert scopes.models_for(users) == ["user"]
        assert scopes.models_for(users, include_descendants=True) == ["user", "role"]
