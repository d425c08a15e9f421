"""Binding script generation for the host tab strip."""

from .generator import (
    BindingBundle,
    BindingDescriptor,
    BindingScriptGenerator,
    basename,
    normalize_path_label,
)
from .overview import render_overview

__all__ = [
    "BindingBundle",
    "BindingDescriptor",
    "BindingScriptGenerator",
    "basename",
    "normalize_path_label",
    "render_overview",
]
