"""clipbridge - share the desktop clipboard with remote devices over HTTP."""

__version__ = "0.1.0"

API_VERSION = "1"
