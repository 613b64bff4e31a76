"""
Back-office UI end-to-end suite: a resilient interaction engine (resolver,
actuator, verified action) and the page objects and scenarios built on it.
"""

__version__ = "0.1.0"
