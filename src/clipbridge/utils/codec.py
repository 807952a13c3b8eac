"""Wire encoding for clipboard payloads.

File contents travel as standard base64 text. A file push carries two
newline-joined strings, one of names and one of encoded blobs, that pair up
by position.
"""

import base64
import binascii
import logging
from dataclasses import dataclass, field
from typing import List, Sequence, Union

from clipbridge.errors import CodecError, MalformedBatch

logger = logging.getLogger(__name__)

DELIMITER = "\n"


def encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def decode(text: str) -> bytes:
    try:
        return base64.b64decode(text.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError, ValueError) as e:
        raise CodecError(f"invalid base64 payload: {e}") from e


@dataclass(frozen=True)
class NamedBlob:
    index: int
    name: str
    content: bytes


@dataclass(frozen=True)
class BatchError:
    index: int
    name: str
    error: Exception


@dataclass
class BatchResult:
    entries: List[NamedBlob] = field(default_factory=list)
    errors: List[BatchError] = field(default_factory=list)

    def log_errors(self, log=None) -> None:
        log = log or logger
        for failure in self.errors:
            log.warning(
                f"Skipping entry {failure.index} ({failure.name!r}): {failure.error}")


def split_lines(joined: str) -> List[str]:
    return [line[:-1] if line.endswith("\r") else line for line in joined.split(DELIMITER)]


def split_named_blobs(names: Union[str, Sequence[str]],
                      blobs: Union[str, Sequence[str]]) -> BatchResult:
    """Pair names with decoded blobs by position.

    Either side may be the newline-joined wire string or an already split
    list. Entries whose blob fails to decode are collected in ``errors`` and
    the rest of the batch carries on. Differing entry counts raise
    ``MalformedBatch`` since there is no safe way to pair them.
    """
    if isinstance(names, str):
        names = split_lines(names)
    if isinstance(blobs, str):
        blobs = split_lines(blobs)
    if len(names) != len(blobs):
        raise MalformedBatch(
            f"got {len(names)} names for {len(blobs)} files")

    result = BatchResult()
    for index, (name, blob) in enumerate(zip(names, blobs)):
        if not name and not blob:
            # blank line, e.g. an empty batch or a trailing delimiter
            continue
        try:
            content = decode(blob)
        except CodecError as e:
            result.errors.append(BatchError(index, name, e))
            continue
        result.entries.append(NamedBlob(index, name, content))
    return result
