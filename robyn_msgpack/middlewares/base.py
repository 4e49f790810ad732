"""Base middleware architecture for Robyn applications."""

from collections.abc import Callable, Iterable

from robyn import Request, Response, Robyn

from robyn_msgpack.core.logger import LogIcon, logger


def default_hook(func: Callable) -> Callable:
    """Mark a hook as the no-op default so it is not registered."""
    func.__default_hook__ = True  # type: ignore[attr-defined]
    return func


class BaseMiddleware:
    """Base class for middlewares with before/after hooks.

    Subclasses override at least one hook. ``endpoints`` restricts the hooks to
    those paths; empty means every route registered on the app.
    """

    endpoints: frozenset[str] = frozenset()

    def __init__(self, endpoints: Iterable[str] | None = None) -> None:
        if endpoints is not None:
            self.endpoints = frozenset(endpoints)

    def __init_subclass__(cls, **kwargs) -> None:
        super().__init_subclass__(**kwargs)
        if not cls.implements("before") and not cls.implements("after"):
            raise TypeError(f"{cls.__name__} must implement at least one of before/after")

    @classmethod
    def implements(cls, hook: str) -> bool:
        return not getattr(getattr(cls, hook), "__default_hook__", False)

    @default_hook
    def before(self, request: Request) -> Request | Response:
        """Called before request handling. Return Request to continue or Response to short-circuit."""
        return request

    @default_hook
    def after(self, response: Response) -> Response:
        """Called after request handling. Return modified Response."""
        return response


class MiddlewareHandler:
    """Manages middleware registration for a Robyn application."""

    def __init__(self, app: Robyn) -> None:
        self._app = app
        self._middlewares: list[BaseMiddleware] = []

    @property
    def middlewares(self) -> list[BaseMiddleware]:
        return self._middlewares

    def register(self, middleware: BaseMiddleware | type[BaseMiddleware]) -> "MiddlewareHandler":
        """Register a middleware instance or class. Returns self for chaining."""
        if isinstance(middleware, type):
            middleware = middleware()
        self._middlewares.append(middleware)
        self._apply_middleware(middleware)
        logger.info(f"Registered middleware: {middleware.__class__.__name__}", icon=LogIcon.ADAPTER)
        return self

    def _apply_middleware(self, middleware: BaseMiddleware) -> None:
        endpoints = middleware.endpoints or self._get_all_routes()
        for endpoint in endpoints:
            if middleware.implements("before"):
                self._register_before(endpoint, middleware.before)
            if middleware.implements("after"):
                self._register_after(endpoint, middleware.after)

    def _get_all_routes(self) -> frozenset[str]:
        routes = self._app.get_all_routes()
        return frozenset(route[1] for route in routes)

    def _register_before(self, endpoint: str, handler: Callable) -> None:
        @self._app.before_request(endpoint)
        async def before_wrapper(request: Request) -> Request | Response:
            return handler(request)

    def _register_after(self, endpoint: str, handler: Callable) -> None:
        @self._app.after_request(endpoint)
        def after_wrapper(response: Response) -> Response:
            return handler(response)
