from clipbridge.models.clipboard import (
    FILE,
    MEDIA,
    PUSH_KINDS,
    TEXT,
    UNKNOWN,
    ClipboardSnapshot,
    FileEntry,
    FileSetSnapshot,
    IncomingPush,
    StagedFile,
    TextSnapshot,
)

__all__ = [
    "FILE",
    "MEDIA",
    "PUSH_KINDS",
    "TEXT",
    "UNKNOWN",
    "ClipboardSnapshot",
    "FileEntry",
    "FileSetSnapshot",
    "IncomingPush",
    "StagedFile",
    "TextSnapshot",
]
