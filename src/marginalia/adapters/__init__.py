"""Concrete implementations of the core ports."""

from .documents import adapter_for, register_adapter
from .paged import PagedAdapter
from .reflow import ReflowAdapter

__all__ = [
    "adapter_for",
    "register_adapter",
    "PagedAdapter",
    "ReflowAdapter",
]
