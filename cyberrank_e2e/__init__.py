"""
CyberRank end-to-end suite: resilient element location, page objects and
BDD steps over Playwright.
"""

__version__ = "0.1.0"
