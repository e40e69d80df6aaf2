"""Router that serves every route with and without a trailing slash."""

from typing import Any, Callable

from fastapi import APIRouter


class TrailingSlashRouter(APIRouter):
    """APIRouter registering ``/path`` and ``/path/`` for each route.

    The slash variant is hidden from the OpenAPI schema. Used together with
    ``redirect_slashes=False`` on the app so clients never get a 307.
    """

    def api_route(
        self, path: str, *, include_in_schema: bool = True, **kwargs: Any
    ) -> Callable[[Callable], Callable]:
        """Register the handler on both path variants."""
        if path.endswith("/") and len(path) > 1:
            path = path[:-1]

        add_primary = super().api_route(path, include_in_schema=include_in_schema, **kwargs)
        add_alternate = super().api_route(f"{path}/", include_in_schema=False, **kwargs)

        def decorator(func: Callable) -> Callable:
            add_alternate(func)
            return add_primary(func)

        return decorator
