"""
GiveMeASong - one link, every streaming platform.

Paste a song URL from any supported streaming platform and get back a
canonical song record with equivalent links on all the others. This package
is the client side: it resolves the URL, fetches the aggregated record and
drives the views that present it.
"""

__version__ = "0.1.0"

from givemeasong.app import GiveMeASongApp

__all__ = ["GiveMeASongApp", "__version__"]
