import inspect
from typing import Any, Awaitable, Callable, Iterable, Type, TypeVar

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from autoinject.domain import IInjector, TypeName

T = TypeVar("T")


def create_fastapi_dependency(injector: IInjector, dependency_type: Type[T]) -> Callable[[], T]:
    """Create a FastAPI Depends() callable that provisions from the injector.

    The instance is built with ``injector.make()`` on every call, so shared
    types yield the same instance and everything else a fresh one.

    Args:
        injector: The injector to provision dependencies from.
        dependency_type: The type to provision when the dependency is called.

    Returns:
        A callable that FastAPI can use with Depends().

    Example:
        >>> injector = Injector()
        >>> injector.share(UserRepository)
        >>>
        >>> get_user_repo = create_fastapi_dependency(injector, UserRepository)
        >>>
        >>> @app.get("/users")
        >>> async def list_users(repo: UserRepository = Depends(get_user_repo)):
        ...     return await repo.get_all()
    """

    def dependency() -> T:
        """Provision the dependency from the injector."""
        return injector.make(dependency_type)

    return dependency


def create_request_dependency(dependency_type: Type[T]) -> Callable[[Request], T]:
    """Create a FastAPI dependency that provisions from the request's injector.

    Requires the InjectorMiddleware to be installed.

    Args:
        dependency_type: The type to provision.

    Returns:
        A callable that provisions from ``request.state.injector``.

    Example:
        >>> app.add_middleware(InjectorMiddleware, injector=injector, scoped=[RequestContext])
        >>>
        >>> get_request_context = create_request_dependency(RequestContext)
        >>>
        >>> @app.get("/process")
        >>> async def process_request(ctx: RequestContext = Depends(get_request_context)):
        ...     return {"request_id": ctx.request_id}
    """

    def request_dependency(request: Request) -> T:
        """Provision from the injector attached to the request."""
        if not hasattr(request.state, "injector"):
            raise RuntimeError("Request does not have an injector. Did you forget to add InjectorMiddleware?")
        injector: IInjector = request.state.injector
        return injector.make(dependency_type)

    return request_dependency


class InjectorMiddleware(BaseHTTPMiddleware):
    """Middleware that creates a scoped injector for each request.

    The scope is accessible via ``request.state.injector``. Types listed in
    ``scoped`` are built once per request; every other shared instance is
    common to all requests.

    Attributes:
        injector: The parent injector to create scopes from.
        scoped: Types that get one instance per request.

    Example:
        >>> injector = Injector()
        >>> injector.share(DatabaseConnection)
        >>>
        >>> app = FastAPI()
        >>> app.add_middleware(InjectorMiddleware, injector=injector, scoped=[RequestContext])
    """

    def __init__(self, app: FastAPI, injector: IInjector, scoped: Iterable[TypeName] = ()):
        """Initialize the middleware with a parent injector.

        Args:
            app: The FastAPI/Starlette application.
            injector: The parent injector to create scopes from.
            scoped: Types to provision once per request.
        """
        super().__init__(app)
        self.injector = injector
        self.scoped = tuple(scoped)

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        """Create a scoped injector for the request and execute the endpoint.

        Args:
            request: The incoming HTTP request.
            call_next: The next middleware or endpoint handler.

        Returns:
            The response from the endpoint.
        """
        request.state.injector = self.injector.create_scope(*self.scoped)
        return await call_next(request)


def inject_dependencies(injector: IInjector, *dependency_types: Type[Any]) -> Callable:
    """Decorator that injects provisioned dependencies into an async endpoint.

    Each type is made by the injector and passed as the keyword argument named
    after the matching leading parameter of the decorated function, unless the
    caller supplied that argument.

    Args:
        injector: The injector to provision dependencies from.
        *dependency_types: Types to provision and inject, in parameter order.

    Returns:
        A decorator function.

    Example:
        >>> @app.get("/users")
        >>> @inject_dependencies(injector, UserService, AuditLog)
        >>> async def list_users(user_service: UserService, audit: AuditLog):
        ...     audit.record("Listing users")
        ...     return await user_service.get_all()
    """

    def decorator(func: Callable) -> Callable:
        """Wrap the function with dependency injection logic."""
        param_names = list(inspect.signature(func).parameters.keys())
        providers = [create_fastapi_dependency(injector, dep_type) for dep_type in dependency_types]

        async def wrapper(*args, **kwargs):
            """Provision dependencies and call the original function."""
            for param_name, provide in zip(param_names, providers):
                if param_name not in kwargs:
                    kwargs[param_name] = provide()

            return await func(*args, **kwargs)

        return wrapper

    return decorator
