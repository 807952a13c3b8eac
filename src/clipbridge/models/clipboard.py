from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from clipbridge.models.schema import ResponseFile
from clipbridge.utils.codec import encode

TEXT = "text"
FILE = "file"
MEDIA = "media"
UNKNOWN = "unknown"

PUSH_KINDS = (TEXT, FILE, MEDIA)


@dataclass(frozen=True)
class FileEntry:
	name: str
	content: bytes

	def to_dict(self) -> Dict[str, str]:
		return ResponseFile(name=self.name, content=encode(self.content)).model_dump()


@dataclass(frozen=True)
class TextSnapshot:
	"""Text currently held by the local clipboard. Empty text is valid."""
	body: str
	kind: str = field(default=TEXT, init=False)

	def to_payload(self) -> Dict[str, Any]:
		return {"type": self.kind, "data": self.body}


@dataclass(frozen=True)
class FileSetSnapshot:
	"""Files referenced by the local clipboard, in enumeration order."""
	entries: Tuple[FileEntry, ...]
	kind: str = field(default=FILE, init=False)

	def to_payload(self) -> Dict[str, Any]:
		return {"type": self.kind, "data": [entry.to_dict() for entry in self.entries]}


ClipboardSnapshot = Union[TextSnapshot, FileSetSnapshot]


@dataclass(frozen=True)
class IncomingPush:
	kind: str
	text: Optional[str] = None
	names: List[str] = field(default_factory=list)
	blobs: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class StagedFile:
	path: Path
	original_name: str
