import os
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence
from urllib.parse import unquote, urlparse

from clipbridge.clipboard.base import ClipboardAdapter
from clipbridge.errors import ClipboardError
from clipbridge.models.clipboard import FILE, MEDIA, TEXT, UNKNOWN


class LinuxClipboard(ClipboardAdapter):
    """Clipboard access through wl-clipboard on Wayland or xclip on X11."""

    _FILE_TARGETS = {"x-special/gnome-copied-files", "text/uri-list"}
    _IMAGE_TARGETS = {
        "image/png",
        "image/jpeg",
        "image/jpg",
        "image/pjpeg",
        "image/bmp",
        "image/x-ms-bmp",
        "image/webp",
        "image/gif",
    }
    _TEXT_TARGETS = {
        "text/plain",
        "text/plain;charset=utf-8",
        "text/plain;charset=utf8",
        "utf8_string",
        "string",
        "text",
    }
    # stderr of wl-paste and xclip when the clipboard holds nothing
    _EMPTY_MARKERS = ("Nothing is copied", "No selection", "not available")

    def __init__(self, backend: Optional[str] = None):
        self.backend = backend or self._detect_backend()

    @staticmethod
    def _detect_backend() -> str:
        if os.environ.get("WAYLAND_DISPLAY") and shutil.which("wl-paste") and shutil.which("wl-copy"):
            return "wayland"
        if shutil.which("xclip"):
            return "xclip"
        raise ClipboardError("neither wl-clipboard nor xclip is available")

    def _list_command(self) -> List[str]:
        if self.backend == "wayland":
            return ["wl-paste", "--list-types"]
        return ["xclip", "-selection", "clipboard", "-t", "TARGETS", "-o"]

    def _read_command(self, target: Optional[str] = None) -> List[str]:
        if self.backend == "wayland":
            command = ["wl-paste", "--no-newline"]
            if target:
                command[1:1] = ["--type", target]
            return command
        command = ["xclip", "-selection", "clipboard", "-o"]
        if target:
            command[3:3] = ["-t", target]
        return command

    def _write_command(self, target: Optional[str] = None) -> List[str]:
        if self.backend == "wayland":
            return ["wl-copy", "--type", target] if target else ["wl-copy"]
        command = ["xclip", "-selection", "clipboard"]
        if target:
            command += ["-t", target]
        return command

    def content_type(self) -> str:
        types = self._parse_type_list(
            self._run_command(self._list_command(), timeout=1.5))
        if not types:
            # an empty clipboard reads as empty text
            return TEXT

        lowered = {t.lower() for t in types}
        if lowered & self._FILE_TARGETS:
            return FILE
        if lowered & self._IMAGE_TARGETS:
            return MEDIA
        if lowered & self._TEXT_TARGETS or any(t.startswith("text/") for t in lowered):
            return TEXT
        return UNKNOWN

    def get_text(self) -> str:
        data = self._run_command(self._read_command(), timeout=1.5)
        if not data:
            return ""
        return data.decode("utf-8", errors="ignore")

    def set_text(self, text: str) -> None:
        self._write(self._write_command(), text.encode("utf-8"))

    def get_file_paths(self) -> List[str]:
        types = {t.lower(): t for t in self._parse_type_list(
            self._run_command(self._list_command(), timeout=1.5))}
        for target in ("x-special/gnome-copied-files", "text/uri-list"):
            if target not in types:
                continue
            data = self._run_command(self._read_command(types[target]), timeout=1.5)
            if data:
                return [str(p) for p in self._parse_paths(data)]
        raise ClipboardError("clipboard does not hold a file list")

    def set_file_paths(self, paths: Sequence[str]) -> None:
        uri_list = "\n".join(Path(p).absolute().as_uri() for p in paths)
        self._write(self._write_command("text/uri-list"), uri_list.encode("utf-8"))

    def _write(self, command: List[str], data: bytes) -> None:
        try:
            subprocess.run(
                command,
                input=data,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                check=True,
                timeout=2.0
            )
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired, OSError) as e:
            raise ClipboardError(f"failed to set clipboard with {command[0]}: {e}") from e

    def _parse_type_list(self, data: Optional[bytes]) -> List[str]:
        if not data:
            return []
        text = data.decode("utf-8", errors="ignore")
        return [line.strip() for line in text.splitlines() if line.strip()]

    def _parse_paths(self, data: bytes) -> List[Path]:
        text = data.decode("utf-8", errors="ignore")
        lines = [line.strip() for line in text.replace(
            "\r", "\n").split("\n") if line.strip()]
        if lines and lines[0].lower() in {"copy", "cut"}:
            lines = lines[1:]

        paths: List[Path] = []
        for entry in lines:
            if entry.startswith("#"):
                continue
            parsed = urlparse(entry)
            if parsed.scheme == "file":
                candidate = Path(unquote(parsed.path))
            else:
                candidate = Path(unquote(entry))

            paths.append(candidate)

        return paths

    def _run_command(self, command: List[str], timeout: float) -> bytes:
        try:
            result = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=True,
                timeout=timeout,
            )
            return result.stdout
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or b"").decode("utf-8", errors="ignore")
            if any(marker in stderr for marker in self._EMPTY_MARKERS):
                return b""
            raise ClipboardError(f"{command[0]} failed: {stderr.strip() or e}") from e
        except subprocess.TimeoutExpired as e:
            raise ClipboardError(f"{command[0]} timed out after {timeout}s") from e
        except OSError as e:
            raise ClipboardError(f"Cannot run {command[0]}: {e}") from e
