"""Dependency Injection Container Module.

Usage:
------
    # Initialize at startup (call once from main.py)
    from dirsync.core.container import initialize_container
    from dirsync.core.config import settings
    initialize_container(settings)

    # In FastAPI deps.py
    def get_container() -> Container:
        return container

    # In tests (construct directly with fakes, don't use global)
    from dirsync.core.container import Container
    test_container = Container(...)
"""

from typing import TYPE_CHECKING, Optional

from dirsync.core.container.container import Container
from dirsync.core.container.factory import create_container

if TYPE_CHECKING:
    from dirsync.core.config import Settings

__all__ = ["Container", "create_container", "container", "initialize_container"]


container: Optional[Container] = None
"""Global container instance.

Initialized via `initialize_container()` at application startup. Domain code
never imports it; domains receive dependencies through their constructors.
"""


def initialize_container(settings: "Settings") -> None:
    """Initialize the global container. Call once at startup.

    Raises:
        RuntimeError: If called more than once (container already initialized)
    """
    global container

    if container is not None:
        raise RuntimeError(
            "Container already initialized. "
            "initialize_container() should only be called once at startup."
        )

    container = create_container(settings)
