import logging
import sys
import threading
import unicodedata
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Union

from clipbridge.errors import StageWriteError, StagingUnavailable
from clipbridge.models.clipboard import StagedFile

logger = logging.getLogger(__name__)

MANIFEST_NAME = "_filename.txt"
FALLBACK_NAME = "unnamed"


def executable_dir() -> Path:
    """Directory of the running program, independent of the working directory."""
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    if sys.argv and sys.argv[0]:
        return Path(sys.argv[0]).resolve().parent
    return Path(sys.executable).resolve().parent


def resolve_staging_dir(configured: Union[str, Path], base: Optional[Path] = None) -> Path:
    path = Path(configured).expanduser()
    if path.is_absolute():
        return path
    return (base or executable_dir()) / path


def sanitize_name(name: str) -> str:
    # wire names may use either separator; keep the last component only
    base = name.replace("\\", "/").split("/")[-1]
    # control characters and line separators would split the manifest line
    base = "".join(c for c in base if unicodedata.category(c) not in {"Cc", "Zl", "Zp"}).strip()
    if base in {"", ".", ".."} or base == MANIFEST_NAME:
        return FALLBACK_NAME
    return base


@dataclass
class CleanupReport:
    removed: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


class StagingArea:
    """Directory holding the files of the most recent file push.

    ``_filename.txt`` lists the paths the clipboard was last pointed at;
    the next push deletes exactly those before staging anything new.
    Callers hold ``lock`` around the whole cleanup, stage and publish cycle.
    """

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory).absolute()
        self.lock = threading.Lock()

    @property
    def manifest_path(self) -> Path:
        return self.directory / MANIFEST_NAME

    def ensure_directory(self) -> Path:
        if self.directory.exists() and not self.directory.is_dir():
            raise StagingUnavailable(
                f"staging path {self.directory} exists and is not a directory")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StagingUnavailable(
                f"cannot create staging directory {self.directory}: {e}") from e
        return self.directory

    def read_manifest(self) -> List[str]:
        if not self.manifest_path.is_file():
            return []
        try:
            with open(self.manifest_path, "r", encoding="utf-8", newline="") as handle:
                text = handle.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Failed to open manifest {self.manifest_path}: {e}")
            return []
        # split on "\n" only; staged names never contain other line breaks
        lines = [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]
        return [line for line in lines if line.strip()]

    def clean_previous(self) -> CleanupReport:
        report = CleanupReport()
        paths = self.read_manifest()
        if not paths:
            return report

        for raw in paths:
            path = Path(raw)
            if not path.is_absolute() or path.parent != self.directory:
                logger.warning(f"Ignoring manifest entry outside {self.directory}: {raw!r}")
                continue
            try:
                path.unlink()
                report.removed.append(raw)
            except FileNotFoundError:
                logger.debug(f"Staged file already gone: {raw}")
            except OSError as e:
                logger.warning(f"Failed to delete staged file {raw}: {e}")
                report.failed.append(raw)

        # paths that could not be removed stay listed
        self.write_manifest(report.failed)
        logger.info(
            f"Cleaned staging area: {len(report.removed)} removed, {len(report.failed)} failed")
        return report

    def stage_file(self, name: str, content: bytes) -> StagedFile:
        file_name = sanitize_name(name)
        file_path = self.directory / file_name

        counter = 1
        original_stem = file_path.stem
        original_suffix = file_path.suffix
        while file_path.exists():
            file_path = self.directory / \
                f"{original_stem}_{counter}{original_suffix}"
            counter += 1

        try:
            file_path.write_bytes(content)
        except OSError as e:
            raise StageWriteError(f"failed to create file {file_path}: {e}") from e
        logger.debug(f"Staged {name!r} at {file_path}")
        return StagedFile(path=file_path, original_name=name)

    def write_manifest(self, paths: Iterable[Union[str, Path]]) -> bool:
        content = "\n".join(str(p) for p in paths)
        try:
            with open(self.manifest_path, "w", encoding="utf-8", newline="") as handle:
                handle.write(content)
            return True
        except OSError as e:
            logger.warning(f"Failed to write manifest {self.manifest_path}: {e}")
            return False
