from clipbridge.clipboard.base import ClipboardAdapter
from clipbridge.clipboard.factory import get_clipboard, get_clipboard_class

__all__ = [
    'ClipboardAdapter',
    'get_clipboard',
    'get_clipboard_class',
]
