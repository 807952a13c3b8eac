import platform
from typing import Type

from clipbridge.clipboard.base import ClipboardAdapter


def get_clipboard_class() -> Type[ClipboardAdapter]:
    system = platform.system()

    if system == "Windows":
        from clipbridge.clipboard.windows import WindowsClipboard
        return WindowsClipboard
    elif system == "Linux":
        from clipbridge.clipboard.linux import LinuxClipboard
        return LinuxClipboard
    elif system == "Darwin":
        from clipbridge.clipboard.macos import MacOSClipboard
        return MacOSClipboard
    else:
        raise NotImplementedError(f"Platform '{system}' is not supported")


def get_clipboard() -> ClipboardAdapter:
    clipboard_class = get_clipboard_class()
    return clipboard_class()
