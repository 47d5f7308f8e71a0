"""Unit tests for FastAPI integration."""

import asyncio
from unittest.mock import Mock

import pytest
from fastapi import FastAPI, Request
from starlette.responses import Response

from autoinject.application.injector import Injector, ScopedInjector
from autoinject.domain.exceptions import InjectionError
from autoinject.infrastructure.fastapi_integration.integration import (
    InjectorMiddleware,
    create_fastapi_dependency,
    create_request_dependency,
    inject_dependencies,
)


class TestCreateFastAPIDependency:
    """Test cases for create_fastapi_dependency function."""

    def test_creates_dependency_function(self):
        """Test that create_fastapi_dependency returns a callable."""
        injector = Injector()

        class TestService:
            pass

        dependency_func = create_fastapi_dependency(injector, TestService)

        assert callable(dependency_func)

    def test_dependency_function_makes_from_injector(self):
        """Test that the dependency function provisions from the injector."""
        injector = Injector()

        class TestService:
            def __init__(self, name):
                self.name = name

        injector.define(TestService, {":name": "test"})

        instance = create_fastapi_dependency(injector, TestService)()

        assert isinstance(instance, TestService)
        assert instance.name == "test"

    def test_dependency_function_returns_shared_instance(self):
        """Test that shared dependencies return the same instance."""
        injector = Injector()

        class SharedService:
            pass

        injector.share(SharedService)
        dependency_func = create_fastapi_dependency(injector, SharedService)

        assert dependency_func() is dependency_func()

    def test_dependency_function_returns_new_instances(self):
        """Test that unshared dependencies are built per call."""
        injector = Injector()

        class TransientService:
            pass

        dependency_func = create_fastapi_dependency(injector, TransientService)

        assert dependency_func() is not dependency_func()

    def test_dependency_with_unresolvable_type(self):
        """Test that provisioning errors surface when the dependency is called."""
        injector = Injector()

        dependency_func = create_fastapi_dependency(injector, "nowhere.Missing")

        with pytest.raises(InjectionError):
            dependency_func()


class TestCreateRequestDependency:
    """Test cases for create_request_dependency function."""

    def test_makes_from_request_injector(self):
        """Test that the request's injector is used."""
        injector = Injector()

        class RequestContext:
            pass

        request = Mock(spec=Request)
        request.state = Mock()
        request.state.injector = injector

        instance = create_request_dependency(RequestContext)(request)

        assert isinstance(instance, RequestContext)

    def test_raises_without_middleware(self):
        """Test the error when no injector is attached."""

        class RequestContext:
            pass

        request = Mock(spec=Request)
        request.state = Mock(spec=[])

        with pytest.raises(RuntimeError, match="InjectorMiddleware"):
            create_request_dependency(RequestContext)(request)


class TestInjectorMiddleware:
    """Test cases for InjectorMiddleware."""

    def test_middleware_initialization(self):
        """Test that middleware initializes correctly."""
        app = FastAPI()
        injector = Injector()

        middleware = InjectorMiddleware(app, injector, scoped=["app.RequestContext"])

        assert middleware.injector is injector
        assert middleware.app is app
        assert middleware.scoped == ("app.RequestContext",)

    @pytest.mark.asyncio
    async def test_middleware_attaches_scoped_injector(self):
        """Test that each request gets a scope created from the injector."""
        injector = Injector()
        middleware = InjectorMiddleware(FastAPI(), injector)
        request = Mock(spec=Request)
        request.state = Mock()

        async def call_next(req):
            assert isinstance(req.state.injector, ScopedInjector)
            assert req.state.injector.parent is injector
            return Response("OK", status_code=200)

        response = await middleware.dispatch(request, call_next)

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_middleware_passes_scoped_types(self):
        """Test that the listed types are handed to create_scope."""
        injector = Mock()
        middleware = InjectorMiddleware(FastAPI(), injector, scoped=["app.RequestContext"])
        request = Mock(spec=Request)
        request.state = Mock()

        async def call_next(req):
            return Response("OK")

        await middleware.dispatch(request, call_next)

        injector.create_scope.assert_called_once_with("app.RequestContext")
        assert request.state.injector is injector.create_scope.return_value

    @pytest.mark.asyncio
    async def test_scoped_type_is_distinct_per_request(self):
        """Test that overlapping requests get their own scoped instance."""
        injector = Injector()

        class RequestContext:
            pass

        middleware = InjectorMiddleware(FastAPI(), injector, scoped=[RequestContext])
        first_seen = asyncio.Event()
        seen = []

        async def slow_call_next(req):
            seen.append(req.state.injector.make(RequestContext))
            first_seen.set()
            await asyncio.sleep(0.01)
            seen.append(req.state.injector.make(RequestContext))
            return Response("OK")

        async def fast_call_next(req):
            await first_seen.wait()
            seen.append(req.state.injector.make(RequestContext))
            return Response("OK")

        first = Mock(spec=Request)
        first.state = Mock()
        second = Mock(spec=Request)
        second.state = Mock()

        await asyncio.gather(
            middleware.dispatch(first, slow_call_next),
            middleware.dispatch(second, fast_call_next),
        )

        slow_first, fast, slow_second = seen
        assert slow_first is slow_second
        assert fast is not slow_first

    @pytest.mark.asyncio
    async def test_middleware_propagates_endpoint_errors(self):
        """Test that endpoint exceptions are not swallowed."""
        middleware = InjectorMiddleware(FastAPI(), Injector())
        request = Mock(spec=Request)
        request.state = Mock()

        async def call_next(req):
            raise ValueError("endpoint failed")

        with pytest.raises(ValueError, match="endpoint failed"):
            await middleware.dispatch(request, call_next)


class TestInjectDependencies:
    """Test cases for inject_dependencies decorator."""

    def test_decorator_returns_callable(self):
        """Test that the decorator wraps the function."""
        injector = Injector()

        class TestService:
            pass

        async def endpoint(service: TestService):
            return service

        assert callable(inject_dependencies(injector, TestService)(endpoint))

    @pytest.mark.asyncio
    async def test_decorator_injects_dependencies(self):
        """Test that missing arguments are provisioned by the injector."""
        injector = Injector()

        class TestService:
            pass

        class AuditLog:
            pass

        @inject_dependencies(injector, TestService, AuditLog)
        async def endpoint(service: TestService, audit: AuditLog):
            return service, audit

        service, audit = await endpoint()

        assert isinstance(service, TestService)
        assert isinstance(audit, AuditLog)

    @pytest.mark.asyncio
    async def test_decorator_keeps_explicit_arguments(self):
        """Test that caller-supplied keyword arguments are not replaced."""
        injector = Injector()

        class TestService:
            pass

        explicit = TestService()

        @inject_dependencies(injector, TestService)
        async def endpoint(service: TestService):
            return service

        assert await endpoint(service=explicit) is explicit
