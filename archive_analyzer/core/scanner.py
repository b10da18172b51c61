"""ZIP archive reading: adapts zipfile members to archive entries."""

import asyncio
import logging
import zipfile
import zlib
from pathlib import Path

from ..config import DecodeFailure, InvalidInputError, UnsupportedArchiveError

logger = logging.getLogger(__name__)

ARCHIVE_SUFFIX = ".zip"

# Errors zipfile raises for damaged, truncated, encrypted or exotic members.
_MEMBER_ERRORS = (
    zipfile.BadZipFile,
    zlib.error,
    EOFError,
    OSError,
    NotImplementedError,
    RuntimeError,
)


class ZipEntry:
    """One member of an open ZIP archive."""

    def __init__(self, archive: zipfile.ZipFile, info: zipfile.ZipInfo):
        self._archive = archive
        self._info = info
        self.name = info.filename
        self.is_dir = info.is_dir() or info.filename.endswith("\\")

    def __repr__(self) -> str:
        kind = "dir" if self.is_dir else "file"
        return f"ZipEntry({self.name!r}, {kind})"

    def read_text(self) -> str:
        """Read and decode the member as UTF-8 (invalid bytes replaced).
        
        Raises:
            DecodeFailure: If the member data is corrupt or unreadable
        """
        try:
            data = self._archive.read(self._info)
        except _MEMBER_ERRORS as e:
            raise DecodeFailure(self.name, str(e)) from e
        return data.decode("utf-8", errors="replace")

    async def decode_as_text(self) -> str:
        return await asyncio.to_thread(self.read_text)


class ZipArchive:
    """An open ZIP archive exposing its members as entries.
    
    Use as a context manager; entries can only be decoded while the archive
    is open.
    
    Example:
        with open_archive(Path("project.zip")) as archive:
            root, summary = await build_tree(archive.entries())
    """

    def __init__(self, path: Path, handle: zipfile.ZipFile):
        self.path = path
        self._handle = handle

    @property
    def name(self) -> str:
        return self.path.name

    def entries(self) -> list[ZipEntry]:
        return [ZipEntry(self._handle, info) for info in self._handle.infolist()]

    def close(self) -> None:
        self._handle.close()

    def __enter__(self) -> 'ZipArchive':
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def open_archive(path: Path | str) -> ZipArchive:
    """Open a ZIP archive for analysis.
    
    Args:
        path: Location of the archive
        
    Returns:
        Open ZipArchive
        
    Raises:
        InvalidInputError: If the file is not a .zip, does not exist, or
            is not a readable ZIP container
    """
    path = Path(path)
    if not path.name.lower().endswith(ARCHIVE_SUFFIX):
        raise UnsupportedArchiveError("Please provide a ZIP archive.")
    if not path.is_file():
        raise InvalidInputError(f"Archive '{path}' not found.")

    try:
        handle = zipfile.ZipFile(path, "r")
    except (zipfile.BadZipFile, OSError) as e:
        raise InvalidInputError(f"Cannot read archive '{path.name}': {e}") from e

    logger.debug("Opened %s (%d members)", path, len(handle.infolist()))
    return ZipArchive(path, handle)
