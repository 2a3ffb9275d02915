"""ShopScope GUI view tabs for the main QTabWidget.

Each tab wraps one list screen and exposes ``refresh()`` for reloading
its collection.
"""

from .list_tab import ListTab

__all__ = ["ListTab"]
