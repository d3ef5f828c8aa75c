"""Per-handler cache of runtime-type resolutions."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Binding:
    """
    The resolved answer to "can this handler process values of a type?".

    Attributes:
        applicable: Whether the handler processes values of the type.
        invoker: The call path to use when applicable, None otherwise.
    """

    applicable: bool
    invoker: Callable[..., Any] | None = None

    def __post_init__(self) -> None:
        if self.applicable and self.invoker is None:
            raise ValueError("An applicable binding needs an invoker")
        if not self.applicable and self.invoker is not None:
            raise ValueError("A non-applicable binding cannot carry an invoker")


NOT_APPLICABLE = Binding(applicable=False)


class TypeResolutionCache:
    """
    Lazily maps runtime types to bindings, resolving each type once.

    The first lookup of a type runs ``discover`` while holding the cache's
    lock, so concurrent first lookups produce exactly one discovery.
    Lookups of already-resolved types do not take the lock. Entries are
    never evicted.

    Example:
        ```python
        cache = TypeResolutionCache(
            lambda t: Binding(True, handle_int) if t is int else NOT_APPLICABLE
        )
        cache.resolve(int).applicable   # True, discovered
        cache.resolve(int).applicable   # True, cached
        ```
    """

    __slots__ = ("_bindings", "_discover", "_lock", "_owner")

    def __init__(
        self,
        discover: Callable[[type], Binding],
        *,
        owner: str | None = None,
    ) -> None:
        """
        Create an empty cache.

        Args:
            discover: Computes the binding for a type never seen before.
            owner: Optional owner name used in log messages.
        """
        self._bindings: dict[type, Binding] = {}
        self._discover = discover
        self._lock = threading.Lock()
        self._owner = owner

    def resolve(self, value_type: type) -> Binding:
        """Get the binding for ``value_type``, discovering it on first use."""
        binding = self._bindings.get(value_type)
        if binding is not None:
            return binding

        with self._lock:
            binding = self._bindings.get(value_type)
            if binding is None:
                binding = self._discover(value_type)
                self._bindings[value_type] = binding
                logger.debug(
                    "%s resolved %s: applicable=%s",
                    self._owner or "handler",
                    value_type.__qualname__,
                    binding.applicable,
                )
        return binding

    def resolved_types(self) -> list[type]:
        """List the types resolved so far, in discovery order."""
        return list(self._bindings)

    def __contains__(self, value_type: object) -> bool:
        return value_type in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)

    def __repr__(self) -> str:
        owner = f" owner={self._owner!r}" if self._owner else ""
        return f"TypeResolutionCache(size={len(self._bindings)}{owner})"
