import subprocess
from pathlib import Path

import pytest

from clipbridge.clipboard.linux import LinuxClipboard
from clipbridge.errors import ClipboardError
from clipbridge.models.clipboard import FILE, MEDIA, TEXT, UNKNOWN


class ScriptedClipboard(LinuxClipboard):
    """LinuxClipboard with canned command output instead of subprocesses."""

    def __init__(self, outputs, backend="xclip"):
        super().__init__(backend=backend)
        self.outputs = outputs
        self.commands = []

    def _run_command(self, command, timeout):
        self.commands.append(command)
        for key, value in self.outputs.items():
            if key in command:
                return value
        return self.outputs.get(None)


@pytest.mark.parametrize("targets, expected", [
    (b"TARGETS\ntext/uri-list\nUTF8_STRING\n", FILE),
    (b"x-special/gnome-copied-files\n", FILE),
    (b"TARGETS\nimage/png\n", MEDIA),
    (b"UTF8_STRING\ntext/plain\n", TEXT),
    (b"text/html\n", TEXT),
    (b"application/x-custom\n", UNKNOWN),
    (b"", TEXT),
])
def test_content_type(targets, expected):
    clipboard = ScriptedClipboard({"TARGETS": targets})
    assert clipboard.content_type() == expected


def test_get_text_empty():
    assert ScriptedClipboard({None: b""}).get_text() == ""


def test_get_file_paths_from_uri_list():
    clipboard = ScriptedClipboard({
        "TARGETS": b"text/uri-list\n",
        "text/uri-list": b"# comment\nfile:///home/me/My%20Docs/a.txt\r\nfile:///tmp/b.png\n",
    })
    assert clipboard.get_file_paths() == [str(Path("/home/me/My Docs/a.txt")), str(Path("/tmp/b.png"))]


def test_get_file_paths_from_gnome_copied_files():
    clipboard = ScriptedClipboard({
        "TARGETS": b"x-special/gnome-copied-files\n",
        "x-special/gnome-copied-files": b"copy\nfile:///tmp/a.txt",
    })
    assert clipboard.get_file_paths() == [str(Path("/tmp/a.txt"))]


def test_get_file_paths_without_file_targets():
    clipboard = ScriptedClipboard({"TARGETS": b"UTF8_STRING\n"})
    with pytest.raises(ClipboardError):
        clipboard.get_file_paths()


def test_wayland_read_command():
    clipboard = ScriptedClipboard({}, backend="wayland")
    assert clipboard._read_command("text/uri-list") == ["wl-paste", "--type", "text/uri-list", "--no-newline"]
    assert clipboard._list_command() == ["wl-paste", "--list-types"]


def test_set_file_paths_writes_uri_list(monkeypatch, tmp_path):
    calls = []

    def fake_run(command, **kwargs):
        calls.append((command, kwargs["input"]))
        return subprocess.CompletedProcess(command, 0)

    monkeypatch.setattr(subprocess, "run", fake_run)
    target = tmp_path / "a b.txt"
    LinuxClipboard(backend="xclip").set_file_paths([str(target)])

    command, data = calls[0]
    assert command == ["xclip", "-selection", "clipboard", "-t", "text/uri-list"]
    assert data == target.as_uri().encode("utf-8")


def test_set_text_failure(monkeypatch):
    def failing_run(command, **kwargs):
        raise subprocess.CalledProcessError(1, command)

    monkeypatch.setattr(subprocess, "run", failing_run)
    with pytest.raises(ClipboardError):
        LinuxClipboard(backend="wayland").set_text("hello")


def test_no_backend(monkeypatch):
    monkeypatch.delenv("WAYLAND_DISPLAY", raising=False)
    monkeypatch.setattr("shutil.which", lambda name: None)
    with pytest.raises(ClipboardError):
        LinuxClipboard()


def test_failing_command_raises(monkeypatch):
    def failing_run(command, **kwargs):
        raise subprocess.CalledProcessError(1, command, stderr=b"Error: Can't open display: :0\n")

    monkeypatch.setattr(subprocess, "run", failing_run)
    clipboard = LinuxClipboard(backend="xclip")
    with pytest.raises(ClipboardError, match="open display"):
        clipboard.content_type()
    with pytest.raises(ClipboardError):
        clipboard.get_text()


def test_missing_tool_raises(monkeypatch):
    def missing_run(command, **kwargs):
        raise FileNotFoundError(2, "No such file or directory", command[0])

    monkeypatch.setattr(subprocess, "run", missing_run)
    with pytest.raises(ClipboardError):
        LinuxClipboard(backend="wayland").get_text()


def test_timeout_raises(monkeypatch):
    def slow_run(command, **kwargs):
        raise subprocess.TimeoutExpired(command, kwargs["timeout"])

    monkeypatch.setattr(subprocess, "run", slow_run)
    with pytest.raises(ClipboardError, match="timed out"):
        LinuxClipboard(backend="xclip").content_type()


def test_empty_wayland_clipboard_reads_as_empty_text(monkeypatch):
    def empty_run(command, **kwargs):
        raise subprocess.CalledProcessError(1, command, stderr=b"Nothing is copied\n")

    monkeypatch.setattr(subprocess, "run", empty_run)
    clipboard = LinuxClipboard(backend="wayland")
    assert clipboard.content_type() == TEXT
    assert clipboard.get_text() == ""
