# backoffice_ui/pages/__init__.py
"""
Pages package
-------------
Page objects for the back-office app. Each one wraps an Interactor; none of
them touch Playwright locators directly for stateful widgets.
"""

from .base import BasePage
from .devices import DevicesPage
from .launch_pad import LaunchPad
from .login import LoginPage
from .profile import ProfilePage

__all__ = [
    "BasePage",
    "DevicesPage",
    "LaunchPad",
    "LoginPage",
    "ProfilePage",
]
