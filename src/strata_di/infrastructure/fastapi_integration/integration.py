from typing import Any, Awaitable, Callable, Optional, Type, TypeVar

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from strata_di.application import Container
from strata_di.domain import ExplicitArguments

T = TypeVar("T")


def create_fastapi_dependency(container: Container, contract: Type[T], name: Optional[str] = None) -> Callable[[], T]:
    """Create a FastAPI Depends() callable that resolves from the container.

    Each call runs one top-level resolution, so the value's lifecycle follows
    its registration (unique, session or singleton).

    Args:
        container: The container to resolve from.
        contract: The contract to resolve when the dependency is called.
        name: Optional registration name.

    Returns:
        A callable that FastAPI can use with Depends().

    Example:
        >>> get_repo = create_fastapi_dependency(container, UserRepository)
        >>>
        >>> @app.get("/users")
        >>> async def list_users(repo: UserRepository = Depends(get_repo)):
        ...     return await repo.get_all()
    """

    def dependency() -> T:
        """Resolve the dependency from the container."""
        return container.get_instance(contract, name)

    return dependency


def create_request_dependency(contract: Type[T], name: Optional[str] = None) -> Callable[[Request], T]:
    """Create a FastAPI dependency that resolves with the request's explicit arguments.

    Requires the ExplicitArgumentsMiddleware to be installed. Recipes built
    this way can depend on ``Request`` directly.

    Args:
        contract: The contract to resolve.
        name: Optional registration name.

    Returns:
        A callable that resolves using the request's explicit arguments.

    Example:
        >>> app.add_middleware(ExplicitArgumentsMiddleware, container=container)
        >>>
        >>> get_context = create_request_dependency(RequestContext)
        >>>
        >>> @app.get("/process")
        >>> async def process(ctx: RequestContext = Depends(get_context)):
        ...     return {"path": ctx.path}
    """

    def request_dependency(request: Request) -> T:
        """Resolve from the container with the request's explicit arguments."""
        if not hasattr(request.state, "di_container"):
            raise RuntimeError(
                "Request does not have a DI container. Did you forget to add ExplicitArgumentsMiddleware?"
            )
        container: Container = request.state.di_container
        explicit_arguments: ExplicitArguments = request.state.explicit_arguments
        return container.get_instance(contract, name, explicit_arguments=explicit_arguments)

    return request_dependency


class ExplicitArgumentsMiddleware(BaseHTTPMiddleware):
    """Middleware attaching per-request explicit arguments.

    Each request gets an ``ExplicitArguments`` seeded with the ``Request``
    itself, accessible via ``request.state.explicit_arguments``, plus the
    container via ``request.state.di_container``.

    Attributes:
        container: The container to resolve from.
        seed: Optional callable adding more request-specific arguments.

    Example:
        >>> app = FastAPI()
        >>> app.add_middleware(ExplicitArgumentsMiddleware, container=container)
    """

    def __init__(
        self,
        app: FastAPI,
        container: Container,
        seed: Optional[Callable[[Request, ExplicitArguments], Any]] = None,
    ):
        """Initialize the middleware.

        Args:
            app: The FastAPI/Starlette application.
            container: The container to resolve from.
            seed: Optional callable receiving the request and its explicit arguments.
        """
        super().__init__(app)
        self.container = container
        self.seed = seed

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        """Attach the container and explicit arguments, then execute the endpoint."""
        explicit_arguments = ExplicitArguments().set(Request, request)
        if self.seed is not None:
            self.seed(request, explicit_arguments)
        request.state.di_container = self.container
        request.state.explicit_arguments = explicit_arguments
        return await call_next(request)
