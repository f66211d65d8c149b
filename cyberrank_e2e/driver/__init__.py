"""
Driver package
--------------
The BrowserDriver contract and its Playwright implementation.
"""

from .base import BrowserDriver
from .playwright_driver import PlaywrightDriver

__all__ = ["BrowserDriver", "PlaywrightDriver"]
