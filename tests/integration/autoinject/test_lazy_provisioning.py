"""Integration tests for proxied (lazy) provisioning."""

from abc import ABC, abstractmethod

import pytest

from autoinject import InjectionError, Injector, lazy_proxy
from autoinject.infrastructure.proxy import is_initialized


class Connection(ABC):
    @abstractmethod
    def query(self, sql: str) -> str: ...


class SqliteConnection(Connection):
    built = 0

    def __init__(self, path=":memory:"):
        SqliteConnection.built += 1
        self.path = path

    def query(self, sql: str) -> str:
        return f"{self.path}: {sql}"


class Report:
    def __init__(self, connection: Connection):
        self.connection = connection


@pytest.fixture(autouse=True)
def reset_build_counter():
    SqliteConnection.built = 0


class TestLazyProvisioning:
    """Test proxy factories registered on the injector."""

    def test_construction_is_deferred(self):
        """Test that the real object is built on first use only."""
        injector = Injector()
        injector.proxy(SqliteConnection, lazy_proxy)

        connection = injector.make(SqliteConnection)

        assert SqliteConnection.built == 0
        assert isinstance(connection, SqliteConnection)
        assert connection.query("select 1") == ":memory:: select 1"
        assert SqliteConnection.built == 1

    def test_factory_receives_class_and_builder(self):
        """Test the arguments handed to a proxy factory."""
        received = []

        def factory(cls, build):
            received.append(cls)
            return build()

        injector = Injector()
        injector.proxy(SqliteConnection, factory)

        connection = injector.make(SqliteConnection)

        assert received == [SqliteConnection]
        assert type(connection) is SqliteConnection

    def test_definition_applies_when_built(self):
        """Test that the stored definition is used by the deferred build."""
        injector = Injector()
        injector.define(SqliteConnection, {":path": "app.db"})
        injector.proxy(SqliteConnection, lazy_proxy)

        assert injector.make(SqliteConnection).path == "app.db"

    def test_custom_definition_applies_when_built(self):
        """Test that a one-shot definition is captured by the deferred build."""
        injector = Injector()
        injector.proxy(SqliteConnection, lazy_proxy)

        assert injector.make(SqliteConnection, {":path": "other.db"}).path == "other.db"

    def test_shared_proxy_is_reused(self):
        """Test that the placeholder itself is the shared instance."""
        injector = Injector()
        injector.share(SqliteConnection)
        injector.proxy(SqliteConnection, lazy_proxy)

        first = injector.make(SqliteConnection)
        second = injector.make(SqliteConnection)

        assert first is second
        first.query("select 1")
        second.query("select 2")
        assert SqliteConnection.built == 1

    def test_proxied_implementation_of_abstract_parameter(self):
        """Test that a proxy on the bound implementation defers the parameter."""
        injector = Injector()
        injector.implement(Connection, SqliteConnection)
        injector.proxy(SqliteConnection, lazy_proxy)

        report = injector.make(Report)

        assert not is_initialized(report.connection)
        assert isinstance(report.connection, Connection)
        assert report.connection.query("x") == ":memory:: x"
        assert is_initialized(report.connection)

    def test_prepare_runs_on_deferred_build(self):
        """Test that prepare callbacks run when the proxy builds the object."""
        prepared = []
        injector = Injector()
        injector.proxy(SqliteConnection, lazy_proxy)
        injector.prepare(SqliteConnection, lambda obj, inj: prepared.append(obj))

        connection = injector.make(SqliteConnection)
        assert prepared == []

        connection.query("select 1")
        assert len(prepared) == 1
        assert prepared[0] == connection

    def test_delegate_takes_precedence_over_proxy(self):
        """Test that a delegate bypasses the proxy factory."""
        instance = SqliteConnection("delegated.db")
        injector = Injector()
        injector.proxy(SqliteConnection, lazy_proxy)
        injector.delegate(SqliteConnection, lambda cls: instance)

        assert injector.make(SqliteConnection) is instance

    def test_build_errors_surface_on_first_use(self):
        """Test that provisioning errors are raised when the proxy is used."""
        injector = Injector()
        injector.proxy(Connection, lazy_proxy)

        connection = injector.make(Connection)

        assert not is_initialized(connection)
        with pytest.raises(InjectionError, match="Cannot instantiate abstract"):
            connection.query("select 1")
