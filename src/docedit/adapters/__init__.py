"""Editor adapter plugin system for docedit."""

# Import adapters to trigger registration
import docedit.adapters.markdown as _markdown  # noqa: F401
import docedit.adapters.source as _source  # noqa: F401
import docedit.adapters.split as _split  # noqa: F401
from docedit.adapters.base import EditorAdapter
from docedit.adapters.registry import AdapterRegistry, UnknownAdapterError

__all__ = [
    "AdapterRegistry",
    "EditorAdapter",
    "UnknownAdapterError",
]
