"""Shared fixtures: an in-memory clipboard and a notifier that records calls."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import pytest

from clipbridge.clipboard.base import ClipboardAdapter
from clipbridge.errors import ClipboardError
from clipbridge.models.clipboard import FILE, TEXT
from clipbridge.services.notification_service import NotificationService, Notifier
from clipbridge.services.sync_service import SyncHandler
from clipbridge.utils.staging import StagingArea


class FakeClipboard(ClipboardAdapter):
    def __init__(self) -> None:
        self.kind: Optional[str] = TEXT
        self.text = ""
        self.paths: List[str] = []
        self.fail_with: Optional[str] = None
        self.calls: List[str] = []
        # snapshot of which staged files existed when set_file_paths ran
        self.existing_at_set: List[bool] = []
        # same snapshot for the paths the clipboard held before this call
        self.previous_existing_at_set: List[bool] = []

    def _check(self, op: str) -> None:
        self.calls.append(op)
        if self.fail_with == op:
            raise ClipboardError(f"{op} failed")

    def content_type(self) -> str:
        self._check("content_type")
        return self.kind

    def get_text(self) -> str:
        self._check("get_text")
        return self.text

    def set_text(self, text: str) -> None:
        self._check("set_text")
        self.kind = TEXT
        self.text = text

    def get_file_paths(self) -> List[str]:
        self._check("get_file_paths")
        return list(self.paths)

    def set_file_paths(self, paths: Sequence[str]) -> None:
        self._check("set_file_paths")
        self.previous_existing_at_set = [Path(p).exists() for p in self.paths]
        self.existing_at_set = [Path(p).exists() for p in paths]
        self.kind = FILE
        self.paths = list(paths)


class RecordingNotifier(Notifier):
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.shown: List[Tuple[str, str]] = []
        self.thread_names: List[str] = []

    def show(self, title: str, body: str) -> None:
        self.thread_names.append(threading.current_thread().name)
        if self.fail:
            raise RuntimeError("notification backend is down")
        self.shown.append((title, body))


@pytest.fixture
def clipboard() -> FakeClipboard:
    return FakeClipboard()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def notifications(notifier):
    service = NotificationService(notifier, auto_start=True)
    yield service
    service.stop()


@pytest.fixture
def staging(tmp_path) -> StagingArea:
    return StagingArea(tmp_path / "temp")


@pytest.fixture
def handler(clipboard, staging, notifications) -> SyncHandler:
    return SyncHandler(clipboard, staging, notifications)
