import os
import struct
import time
from contextlib import contextmanager
from typing import List, Sequence

import win32clipboard as wc
import win32con

from clipbridge.clipboard.base import ClipboardAdapter
from clipbridge.errors import ClipboardError
from clipbridge.models.clipboard import FILE, MEDIA, TEXT, UNKNOWN

# DROPFILES header: pFiles, pt.x, pt.y, fNC, fWide
_DROPFILES = struct.Struct("<Iiiii")

_IMAGE_FORMATS = (win32con.CF_DIB, win32con.CF_BITMAP, getattr(win32con, "CF_DIBV5", 17))


class WindowsClipboard(ClipboardAdapter):

    @contextmanager
    def _opened(self):
        opened = False
        last_error = None
        for _ in range(3):
            try:
                wc.OpenClipboard()
                opened = True
                break
            except Exception as e:
                last_error = e
                time.sleep(0.05)

        if not opened:
            raise ClipboardError(f"failed to open clipboard: {last_error}")
        try:
            yield
        finally:
            try:
                wc.CloseClipboard()
            except Exception:
                pass

    def content_type(self) -> str:
        with self._opened():
            if wc.IsClipboardFormatAvailable(win32con.CF_HDROP):
                return FILE
            if wc.IsClipboardFormatAvailable(wc.CF_UNICODETEXT) or wc.IsClipboardFormatAvailable(win32con.CF_TEXT):
                return TEXT
            if any(wc.IsClipboardFormatAvailable(fmt) for fmt in _IMAGE_FORMATS):
                return MEDIA
            if wc.CountClipboardFormats() == 0:
                return TEXT
        return UNKNOWN

    def get_text(self) -> str:
        with self._opened():
            if not wc.IsClipboardFormatAvailable(wc.CF_UNICODETEXT):
                return ""
            try:
                text = wc.GetClipboardData(wc.CF_UNICODETEXT)
            except Exception as e:
                raise ClipboardError(f"failed to read clipboard text: {e}") from e
        return text or ""

    def set_text(self, text: str) -> None:
        with self._opened():
            try:
                wc.EmptyClipboard()
                wc.SetClipboardData(wc.CF_UNICODETEXT, text)
            except Exception as e:
                raise ClipboardError(f"failed to set clipboard text: {e}") from e

    def get_file_paths(self) -> List[str]:
        with self._opened():
            try:
                files = wc.GetClipboardData(win32con.CF_HDROP)
            except Exception as e:
                raise ClipboardError(f"failed to read clipboard files: {e}") from e

        if isinstance(files, str):
            files = [files]
        return [os.path.normpath(path) for path in files or []]

    def set_file_paths(self, paths: Sequence[str]) -> None:
        file_list = "".join(os.path.abspath(p) + "\0" for p in paths) + "\0"
        data = _DROPFILES.pack(_DROPFILES.size, 0, 0, 0, 1) + \
            file_list.encode("utf-16-le")

        with self._opened():
            try:
                wc.EmptyClipboard()
                wc.SetClipboardData(win32con.CF_HDROP, data)
            except Exception as e:
                raise ClipboardError(f"failed to set clipboard files: {e}") from e
