import logging
from pathlib import Path
from typing import Any, List, Optional

from pydantic import ValidationError

from clipbridge.clipboard.base import ClipboardAdapter
from clipbridge.errors import (
    ClientError,
    ClipboardError,
    MalformedBatch,
    StageWriteError,
    StagingUnavailable,
)
from clipbridge.models.clipboard import (
    FILE,
    MEDIA,
    PUSH_KINDS,
    TEXT,
    ClipboardSnapshot,
    FileEntry,
    FileSetSnapshot,
    IncomingPush,
    StagedFile,
    TextSnapshot,
)
from clipbridge.models.schema import FileBody, TextBody
from clipbridge.services.notification_service import NotificationService
from clipbridge.utils.codec import split_lines, split_named_blobs
from clipbridge.utils.staging import StagingArea

logger = logging.getLogger(__name__)

ANONYMOUS_CLIENT = "匿名设备"
UNRECOGNIZED_CONTENT = "无法识别剪切板内容"
FILES_COPIED = "[文件] 被复制"
FILES_PASTED = "[文件] 已复制到剪贴板"
MEDIA_PASTED = "[图片媒体] 已复制到剪贴板"


class SyncHandler:
    """Moves clipboard content between HTTP clients and the local clipboard.

    The staging area is the only state shared between requests; file and
    media pushes hold its lock from cleanup until the clipboard points at
    the new files.
    """

    def __init__(
        self,
        clipboard: ClipboardAdapter,
        staging: StagingArea,
        notifications: Optional[NotificationService] = None,
    ) -> None:
        self.clipboard = clipboard
        self.staging = staging
        self.notifications = notifications or NotificationService(auto_start=True)

    # pull

    def pull(self, client: str = ANONYMOUS_CLIENT, request_id: str = "") -> ClipboardSnapshot:
        log = _RequestLogger(logger, {"request_id": request_id})
        try:
            content_type = self.clipboard.content_type()
        except ClipboardError as e:
            log.info(f"failed to get content type of clipboard: {e}")
            raise ClientError(UNRECOGNIZED_CONTENT) from e

        if content_type == TEXT:
            return self._pull_text(client, log)
        if content_type == FILE:
            return self._pull_files(client, log)

        log.info(f"unsupported clipboard content type: {content_type}")
        raise ClientError(UNRECOGNIZED_CONTENT)

    def _pull_text(self, client: str, log: "_RequestLogger") -> TextSnapshot:
        try:
            text = self.clipboard.get_text()
        except ClipboardError as e:
            log.warning(f"failed to get clipboard: {e}")
            raise ClientError("读取剪切板失败") from e

        log.info("get clipboard text")
        self.notifications.send_copy(client, text)
        return TextSnapshot(body=text)

    def _pull_files(self, client: str, log: "_RequestLogger") -> FileSetSnapshot:
        try:
            paths = self.clipboard.get_file_paths()
        except ClipboardError as e:
            log.warning(f"failed to get path of files from clipboard: {e}")
            raise ClientError("读取剪切板文件失败") from e

        entries: List[FileEntry] = []
        for raw in paths:
            path = Path(raw)
            try:
                content = path.read_bytes()
            except OSError as e:
                log.warning(f"read file {raw} failed: {e}")
                continue
            entries.append(FileEntry(name=path.name, content=content))

        log.info(f"get clipboard files: {len(entries)} of {len(paths)}")
        self.notifications.send_copy(client, FILES_COPIED)
        return FileSetSnapshot(entries=tuple(entries))

    # push

    def push(self, kind: Optional[str], body: Any, client: str = ANONYMOUS_CLIENT,
             request_id: str = "") -> List[StagedFile]:
        if kind not in PUSH_KINDS:
            raise ClientError(f"不支持的内容类型: {kind}")
        if kind == TEXT:
            self.push_text(body, client, request_id)
            return []
        return self.push_files(kind, body, client, request_id)

    def push_text(self, body: Any, client: str = ANONYMOUS_CLIENT, request_id: str = "") -> None:
        log = _RequestLogger(logger, {"request_id": request_id})
        try:
            parsed = TextBody.model_validate(body)
        except ValidationError as e:
            log.warning(f"failed to bind text body: {e}")
            raise ClientError("请求内容格式错误") from e
        push = IncomingPush(kind=TEXT, text=parsed.text)

        try:
            self.clipboard.set_text(push.text)
        except ClipboardError as e:
            log.warning(f"failed to set clipboard: {e}")
            raise ClientError("设置剪切板失败") from e

        log.info(f"set clipboard text: {push.text!r}")
        self.notifications.send_paste(client, push.text)

    def push_files(self, kind: str, body: Any, client: str = ANONYMOUS_CLIENT,
                   request_id: str = "") -> List[StagedFile]:
        log = _RequestLogger(logger, {"request_id": request_id})
        try:
            parsed = FileBody.model_validate(body)
        except ValidationError as e:
            log.warning(f"failed to bind file body: {e}")
            raise ClientError("请求内容格式错误") from e
        push = IncomingPush(kind=kind, names=split_lines(parsed.names),
                            blobs=split_lines(parsed.files))

        with self.staging.lock:
            try:
                self.staging.ensure_directory()
            except StagingUnavailable as e:
                log.warning(f"staging directory unavailable: {e}")
                raise ClientError("无法创建临时文件目录") from e

            self.staging.clean_previous()

            try:
                batch = split_named_blobs(push.names, push.blobs)
            except MalformedBatch as e:
                log.warning(f"failed to get files from request: {e}")
                raise ClientError("文件名与文件数量不匹配") from e
            batch.log_errors(log)

            staged: List[StagedFile] = []
            for entry in batch.entries:
                try:
                    staged.append(self.staging.stage_file(entry.name, entry.content))
                except StageWriteError as e:
                    log.warning(f"failed to create file: {e}")

            paths = [str(s.path) for s in staged]
            self.staging.write_manifest(paths)

            try:
                self.clipboard.set_file_paths(paths)
            except ClipboardError as e:
                log.warning(f"failed to set clipboard: {e}")
                raise ClientError("设置剪切板失败") from e

        log.info(
            f"set clipboard {push.kind}: {len(paths)} files staged {paths}")
        self.notifications.send_paste(client, MEDIA_PASTED if push.kind == MEDIA else FILES_PASTED)
        return staged


class _RequestLogger(logging.LoggerAdapter):
    """Prefixes messages with the request id."""

    def process(self, msg, kwargs):
        request_id = self.extra.get("request_id")
        if request_id:
            msg = f"[{request_id}] {msg}"
        return msg, kwargs
