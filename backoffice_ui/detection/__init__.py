# backoffice_ui/detection/__init__.py
"""
Detection package
-----------------
Page-state probes used around interactions: click-interception hints and
post-navigation stability waits.
"""

from .overlay_detector import OverlayDetector
from .stability import settle_page, wait_for_dom_stable, wait_for_network_idle

__all__ = [
    "OverlayDetector",
    "settle_page",
    "wait_for_dom_stable",
    "wait_for_network_idle",
]
