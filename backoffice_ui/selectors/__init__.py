# backoffice_ui/selectors/__init__.py
"""
Selectors package
-----------------
Candidate selectors, ordered locator sets, and the resolver that turns a
locator set into a live element (or a `NotFound` value).
"""

from .locator import LocatorSet, Selector, SelectorStrategy, resolve_locator
from .resolver import NotFound, WidgetHandle, first_present, require, resolve

__all__ = [
    "LocatorSet",
    "Selector",
    "SelectorStrategy",
    "resolve_locator",
    "NotFound",
    "WidgetHandle",
    "resolve",
    "require",
    "first_present",
]
