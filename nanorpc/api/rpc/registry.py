"""Method registry: name -> handler, unique for the registry's lifetime.

The server registers handlers during startup and only reads the registry
while serving; ``freeze()`` marks the end of the registration phase.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Iterator

from nanorpc.utils.exceptions import DuplicateMethodError, RegistryFrozenError

MethodHandler = Callable[..., Any | Awaitable[Any]]


class MethodRegistry:
    """Registry for RPC method handlers."""

    def __init__(self):
        self._methods: dict[str, MethodHandler] = {}
        self._frozen = False

    def register(self, name: str, handler: MethodHandler) -> None:
        """Register a handler; a name can only be registered once."""
        if not isinstance(name, str) or not name:
            raise ValueError("method name must be a non-empty string")
        if not callable(handler):
            raise TypeError(f"handler for {name} is not callable")
        if name in self._methods:
            raise DuplicateMethodError(name)
        if self._frozen:
            raise RegistryFrozenError(name)
        self._methods[name] = handler

    def get(self, name: str) -> MethodHandler | None:
        """Get a handler by exact (case-sensitive) name."""
        return self._methods.get(name)

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def method_names(self) -> list[str]:
        """Registered method names in registration order."""
        return list(self._methods)

    def __len__(self) -> int:
        return len(self._methods)

    def __contains__(self, name: object) -> bool:
        return name in self._methods

    def __iter__(self) -> Iterator[str]:
        return iter(self._methods)
