"""Mailbox Search - keyword search over a multi-tenant email store.

This package builds a compact, length-bounded search index for every stored
message and answers free-text keyword queries against it with a hybrid
exact + prefix matching scheme, scoped to one mailbox.
"""

__version__ = "0.1.0"
__author__ = "Trickl"

from mailbox_search.config import Settings, get_settings

__all__ = ["Settings", "get_settings", "__version__", "__author__"]
