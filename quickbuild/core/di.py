"""
Dependency injection helpers for quickbuild.

Provides lazy resolution with fallback to default implementations, so
services work both inside a bootstrapped CLI and standalone in tests.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable

T = TypeVar("T")


def resolve_or_default(
    interface: type[T],
    default_factory: Callable[[], T],
) -> T:
    """Resolve a service from the container or create a default.

    Args:
        interface: The interface/protocol type to resolve
        default_factory: Callable that creates the default implementation

    Returns:
        Resolved service instance or default

    Example:
        >>> from quickbuild.core.interfaces.logger import ILogger
        >>> from quickbuild.services.logging import NullLogger
        >>> logger = resolve_or_default(ILogger, NullLogger)
    """
    from .container import get_container

    instance = get_container().try_resolve(interface)
    if instance is not None:
        return instance
    return default_factory()


class LazyService:
    """Descriptor for lazy service resolution.

    Use this as a class attribute to defer service resolution until
    first access. An instance attribute of the same name (set by a
    constructor argument or a test) takes precedence.

    Example:
        class BuildOrchestrator:
            logger = LazyService(ILogger, NullLogger)
    """

    def __init__(
        self,
        interface: type[T],
        default_factory: Callable[[], T],
    ) -> None:
        self.interface = interface
        self.default_factory = default_factory
        self._attr = ""

    def __set_name__(self, owner: type, name: str) -> None:
        self._attr = f"_{name}"

    def __get__(self, obj: object, objtype: type | None = None):
        if obj is None:
            return self
        value = obj.__dict__.get(self._attr)
        if value is None:
            value = resolve_or_default(self.interface, self.default_factory)
            obj.__dict__[self._attr] = value
        return value

    def __set__(self, obj: object, value) -> None:
        obj.__dict__[self._attr] = value
