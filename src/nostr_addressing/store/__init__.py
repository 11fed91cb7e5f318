"""Binding persistence for trust-on-first-use history."""

from .bindings import (
    BindingStore,
    JsonFileBindingStore,
    MemoryBindingStore,
    get_binding_store,
    reset_binding_store,
)

__all__ = [
    "BindingStore",
    "JsonFileBindingStore",
    "MemoryBindingStore",
    "get_binding_store",
    "reset_binding_store",
]
