from typing import List, Sequence

from AppKit import (
    NSPasteboard,
    NSPasteboardTypeFileURL,
    NSPasteboardTypePNG,
    NSPasteboardTypeString,
    NSPasteboardTypeTIFF,
)
from Foundation import NSURL

from clipbridge.clipboard.base import ClipboardAdapter
from clipbridge.errors import ClipboardError
from clipbridge.models.clipboard import FILE, MEDIA, TEXT, UNKNOWN


class MacOSClipboard(ClipboardAdapter):

    def _pasteboard(self):
        return NSPasteboard.generalPasteboard()

    def content_type(self) -> str:
        try:
            types = list(self._pasteboard().types() or [])
        except Exception as e:
            raise ClipboardError(f"failed to list pasteboard types: {e}") from e

        if not types:
            return TEXT
        if NSPasteboardTypeFileURL in types:
            return FILE
        if NSPasteboardTypePNG in types or NSPasteboardTypeTIFF in types:
            return MEDIA
        if NSPasteboardTypeString in types:
            return TEXT
        return UNKNOWN

    def get_text(self) -> str:
        try:
            text = self._pasteboard().stringForType_(NSPasteboardTypeString)
        except Exception as e:
            raise ClipboardError(f"failed to read pasteboard text: {e}") from e
        return str(text) if text else ""

    def set_text(self, text: str) -> None:
        pasteboard = self._pasteboard()
        try:
            pasteboard.clearContents()
            ok = pasteboard.setString_forType_(text, NSPasteboardTypeString)
        except Exception as e:
            raise ClipboardError(f"failed to set pasteboard text: {e}") from e
        if not ok:
            raise ClipboardError("pasteboard rejected text")

    def get_file_paths(self) -> List[str]:
        try:
            file_urls = self._pasteboard().readObjectsForClasses_options_([NSURL], None)
        except Exception as e:
            raise ClipboardError(f"failed to read pasteboard files: {e}") from e

        return [str(url.path()) for url in file_urls or [] if url.isFileURL()]

    def set_file_paths(self, paths: Sequence[str]) -> None:
        pasteboard = self._pasteboard()
        file_urls = [NSURL.fileURLWithPath_(str(p)) for p in paths]
        try:
            pasteboard.clearContents()
            if file_urls and not pasteboard.writeObjects_(file_urls):
                raise ClipboardError("pasteboard rejected file list")
        except ClipboardError:
            raise
        except Exception as e:
            raise ClipboardError(f"failed to set pasteboard files: {e}") from e
