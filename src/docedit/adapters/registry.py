"""Editor adapter registry: discover and register adapter implementations."""

from __future__ import annotations

from docedit.adapters.base import EditorAdapter
from docedit.models.session import AdapterDescriptor


class UnknownAdapterError(Exception):
    """Raised when a requested adapter is not registered."""

    def __init__(self, adapter_id: str, available: list[str]) -> None:
        self.adapter_id = adapter_id
        self.available = available
        super().__init__(f"Unknown editor adapter '{adapter_id}'. Available: {', '.join(available)}")


class AdapterRegistry:
    """Registry for editor adapter plugins."""

    _adapters: dict[str, type[EditorAdapter]] = {}

    @classmethod
    def register(cls, adapter_class: type[EditorAdapter]) -> type[EditorAdapter]:
        """Register an adapter class. Can be used as a decorator."""
        # Instantiate to read the id property
        instance = adapter_class()
        cls._adapters[instance.id] = adapter_class
        return adapter_class

    @classmethod
    def get(cls, adapter_id: str) -> EditorAdapter:
        """Get an instance of the named adapter."""
        if adapter_id not in cls._adapters:
            raise UnknownAdapterError(adapter_id, available=cls.available())
        return cls._adapters[adapter_id]()

    @classmethod
    def available(cls) -> list[str]:
        """List registered adapter ids."""
        return sorted(cls._adapters.keys())

    @classmethod
    def describe(cls) -> list[AdapterDescriptor]:
        descriptors = []
        for adapter_id in cls.available():
            adapter = cls.get(adapter_id)
            descriptors.append(
                AdapterDescriptor(
                    id=adapter.id, name=adapter.name, has_validate=adapter.validator() is not None
                )
            )
        return descriptors

    @classmethod
    def reset(cls) -> None:
        """Clear all registered adapters (for testing)."""
        cls._adapters.clear()
