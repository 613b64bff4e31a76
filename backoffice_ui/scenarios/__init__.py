# backoffice_ui/scenarios/__init__.py
"""
Scenarios package
-----------------
Importing this package registers every bundled scenario with
`backoffice_ui.core.scenario.REGISTRY`.
"""

from . import devices, launch_pad, login, profile  # noqa: F401

__all__ = ["devices", "launch_pad", "login", "profile"]
