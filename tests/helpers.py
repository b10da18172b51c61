"""Shared fixtures for the test suite."""

import asyncio
import zipfile
from pathlib import Path
from typing import Optional


class FakeEntry:
    """In-memory archive entry with controllable decode behaviour."""

    def __init__(
        self,
        name: str,
        text: Optional[str] = "",
        is_dir: bool = False,
        delay: float = 0.0,
        error: Optional[BaseException] = None
    ):
        self.name = name
        self.is_dir = is_dir
        self.text = text
        self.delay = delay
        self.error = error
        self.decode_calls = 0
        self.finished = False

    async def decode_as_text(self) -> str:
        self.decode_calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        self.finished = True
        return self.text


def make_zip(path: Path, members: dict[str, str | bytes | None]) -> Path:
    """Write a ZIP archive; a None value creates a directory entry."""
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_STORED) as z:
        for name, data in members.items():
            if data is None:
                z.writestr(zipfile.ZipInfo(name if name.endswith("/") else name + "/"), b"")
            else:
                z.writestr(name, data)
    return path


def scenario_entries() -> list[FakeEntry]:
    """A Java source, an explicit empty directory and a binary file."""
    return [
        FakeEntry("src/Main.java", text="a\nb\n"),
        FakeEntry("src/util/", is_dir=True),
        FakeEntry("README.bin", text=None),
    ]
