from typing import Any, Callable, Iterator, Type


class LazyProxy:
    """Placeholder that builds the real object on first use.

    Holds either the pending build callback or the built instance. Attribute
    access, attribute assignment, calls and the common dunder protocols are
    forwarded to the real object, building it first when needed.
    ``isinstance(proxy, cls)`` holds before the object is built.

    Example:
        >>> proxy = LazyProxy(Connection, lambda: Connection("db://"))
        >>> is_initialized(proxy)
        False
        >>> proxy.ping()  # builds the connection
    """

    __slots__ = ("_lazy_cls", "_lazy_build", "_lazy_instance", "_lazy_initialized")

    def __init__(self, cls: Type, build: Callable[[], Any]) -> None:
        object.__setattr__(self, "_lazy_cls", cls)
        object.__setattr__(self, "_lazy_build", build)
        object.__setattr__(self, "_lazy_instance", None)
        object.__setattr__(self, "_lazy_initialized", False)

    def _lazy_resolve(self) -> Any:
        if not object.__getattribute__(self, "_lazy_initialized"):
            build = object.__getattribute__(self, "_lazy_build")
            object.__setattr__(self, "_lazy_instance", build())
            object.__setattr__(self, "_lazy_initialized", True)
            object.__setattr__(self, "_lazy_build", None)
        return object.__getattribute__(self, "_lazy_instance")

    @property  # type: ignore[misc]
    def __class__(self) -> Type:
        if object.__getattribute__(self, "_lazy_initialized"):
            return type(object.__getattribute__(self, "_lazy_instance"))
        return object.__getattribute__(self, "_lazy_cls")

    def __getattr__(self, name: str) -> Any:
        return getattr(self._lazy_resolve(), name)

    def __setattr__(self, name: str, value: Any) -> None:
        setattr(self._lazy_resolve(), name, value)

    def __delattr__(self, name: str) -> None:
        delattr(self._lazy_resolve(), name)

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self._lazy_resolve()(*args, **kwargs)

    def __repr__(self) -> str:
        if object.__getattribute__(self, "_lazy_initialized"):
            return repr(object.__getattribute__(self, "_lazy_instance"))
        cls = object.__getattribute__(self, "_lazy_cls")
        return f"<LazyProxy for {cls.__qualname__} (uninitialized)>"

    def __str__(self) -> str:
        return str(self._lazy_resolve())

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, LazyProxy):
            other = other._lazy_resolve()
        return self._lazy_resolve() == other

    def __ne__(self, other: Any) -> bool:
        return not self == other

    def __hash__(self) -> int:
        return hash(self._lazy_resolve())

    def __bool__(self) -> bool:
        return bool(self._lazy_resolve())

    def __len__(self) -> int:
        return len(self._lazy_resolve())

    def __iter__(self) -> Iterator[Any]:
        return iter(self._lazy_resolve())

    def __contains__(self, item: Any) -> bool:
        return item in self._lazy_resolve()

    def __getitem__(self, key: Any) -> Any:
        return self._lazy_resolve()[key]

    def __setitem__(self, key: Any, value: Any) -> None:
        self._lazy_resolve()[key] = value


def is_initialized(proxy: LazyProxy) -> bool:
    """Check whether a proxy has built its real object."""
    return object.__getattribute__(proxy, "_lazy_initialized")


def lazy_proxy(cls: Type, build: Callable[[], Any]) -> LazyProxy:
    """Proxy factory for ``Injector.proxy()``.

    Example:
        >>> injector.proxy(ReportGenerator, lazy_proxy)
        >>> generator = injector.make(ReportGenerator)  # nothing built yet
    """
    return LazyProxy(cls, build)
