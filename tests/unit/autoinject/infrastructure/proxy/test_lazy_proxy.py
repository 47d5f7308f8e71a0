"""Unit tests for LazyProxy."""

from unittest.mock import Mock

import pytest

from autoinject.infrastructure.proxy import LazyProxy, is_initialized, lazy_proxy


class Connection:
    def __init__(self, dsn="db://local"):
        self.dsn = dsn
        self.items = ["a", "b"]

    def ping(self):
        return "pong"

    def __call__(self, query):
        return f"ran {query}"

    def __len__(self):
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    def __getitem__(self, index):
        return self.items[index]


class TestLazyInitialization:
    """Test cases for deferred construction."""

    def test_not_built_on_creation(self):
        """Test that the build callback is not called eagerly."""
        build = Mock(return_value=Connection())

        proxy = LazyProxy(Connection, build)

        assert not is_initialized(proxy)
        build.assert_not_called()

    def test_isinstance_does_not_build(self):
        """Test that type checks work before initialization."""
        build = Mock(return_value=Connection())
        proxy = LazyProxy(Connection, build)

        assert isinstance(proxy, Connection)
        assert isinstance(proxy, LazyProxy)
        build.assert_not_called()

    def test_attribute_access_builds_once(self):
        """Test that the first use builds and later uses reuse the instance."""
        build = Mock(return_value=Connection("db://remote"))
        proxy = LazyProxy(Connection, build)

        assert proxy.dsn == "db://remote"
        assert proxy.ping() == "pong"
        assert is_initialized(proxy)
        build.assert_called_once_with()

    def test_class_reports_real_type_after_build(self):
        """Test that __class__ follows the built instance."""

        class Pooled(Connection):
            pass

        proxy = LazyProxy(Connection, Pooled)
        proxy.ping()

        assert proxy.__class__ is Pooled
        assert isinstance(proxy, Pooled)

    def test_build_errors_propagate(self):
        """Test that a failing build surfaces on first use."""

        def build():
            raise RuntimeError("cannot connect")

        proxy = LazyProxy(Connection, build)

        with pytest.raises(RuntimeError, match="cannot connect"):
            proxy.ping()
        assert not is_initialized(proxy)


class TestForwarding:
    """Test cases for operations forwarded to the real object."""

    def test_setattr_and_delattr(self):
        """Test that attribute writes reach the real object."""
        real = Connection()
        proxy = LazyProxy(Connection, lambda: real)

        proxy.dsn = "db://other"
        assert real.dsn == "db://other"

        del proxy.dsn
        assert not hasattr(real, "dsn")

    def test_call(self):
        """Test that calling the proxy calls the real object."""
        proxy = LazyProxy(Connection, Connection)

        assert proxy("select 1") == "ran select 1"

    def test_container_protocols(self):
        """Test len, iteration, membership and indexing."""
        proxy = LazyProxy(Connection, Connection)

        assert len(proxy) == 2
        assert list(proxy) == ["a", "b"]
        assert "a" in proxy
        assert proxy[1] == "b"

    def test_equality_and_hash(self):
        """Test that equality and hashing use the real object."""
        proxy = LazyProxy(str, lambda: "value")

        assert proxy == "value"
        assert proxy != "other"
        assert hash(proxy) == hash("value")
        assert proxy == LazyProxy(str, lambda: "value")

    def test_str_and_bool(self):
        """Test string conversion and truthiness."""
        assert str(LazyProxy(int, lambda: 7)) == "7"
        assert bool(LazyProxy(list, list)) is False

    def test_repr(self):
        """Test the placeholder and forwarded representations."""
        proxy = LazyProxy(Connection, lambda: "real")

        assert repr(proxy) == "<LazyProxy for Connection (uninitialized)>"
        str(proxy)
        assert repr(proxy) == "'real'"


class TestFactory:
    """Test cases for the lazy_proxy factory."""

    def test_creates_lazy_proxy(self):
        """Test that the factory returns an uninitialized proxy."""
        proxy = lazy_proxy(Connection, Connection)

        assert isinstance(proxy, LazyProxy)
        assert not is_initialized(proxy)
