"""Default transformation service for zip-format archives."""

from __future__ import annotations

import logging
import re
from pathlib import Path, PurePosixPath
from typing import Dict, Mapping, Optional, Pattern, Set
from zipfile import ZIP_DEFLATED, ZipFile

TEXT_SUFFIXES = {".py", ".pyi", ".txt", ".properties", ".json", ".xml", ".cfg", ".toml", ".mf"}
SERVICES_DIR = "META-INF/services/"


class _Substitution:
    """Single-pass replacement of whole namespace references, longest pattern first."""

    def __init__(self, table: Dict[bytes, bytes], stop: bytes = rb"\w") -> None:
        self.table = table
        self.regex: Optional[Pattern[bytes]] = None
        if table:
            alternation = b"|".join(re.escape(key) for key in sorted(table, key=len, reverse=True))
            # a reference never starts right after a dot, a slash or a word character
            self.regex = re.compile(rb"(?<![\w./])(?:" + alternation + rb")(?![" + stop + rb"])")

    def sub(self, data: bytes) -> bytes:
        if self.regex is None:
            return data
        return self.regex.sub(lambda match: self.table[match.group(0)], data)

    def sub_leading(self, data: bytes) -> bytes:
        if self.regex is None:
            return data
        match = self.regex.match(data)
        if match is None:
            return data
        return self.table[match.group(0)] + data[match.end():]


class ZipNamespaceRelocator:
    """Moves packages inside a zip archive to their relocated namespace.

    Entry paths are rewritten with the slash form of each pattern, and text
    entries have both dotted and slashed references rewritten. Binary entries
    (compiled classes included) are copied unchanged.
    """

    def __init__(self) -> None:
        self.log = logging.getLogger(self.__class__.__name__)

    def transform(self, input_path: Path, output_path: Path, mapping: Mapping[str, str]) -> None:
        # a dotted reference followed by a slash is a path, left to the slashed form
        dotted = _Substitution({old.encode(): new.encode() for old, new in mapping.items()}, stop=rb"\w/")
        slashed = _Substitution(
            {old.replace(".", "/").encode(): new.replace(".", "/").encode() for old, new in mapping.items()}
        )
        tmp_archive = output_path.with_name(output_path.name + ".tmp")
        seen: Set[str] = set()
        parents: Set[str] = set()
        moved = 0
        try:
            with ZipFile(input_path, "r") as zin, ZipFile(tmp_archive, "w", ZIP_DEFLATED) as zout:
                for info in zin.infolist():
                    name = self._relocate_name(info.filename, dotted, slashed)
                    if name in seen:
                        self.log.debug("Skipping duplicate entry %s", name)
                        continue
                    seen.add(name)
                    data = zin.read(info)
                    if not info.is_dir() and self._is_text(name):
                        data = slashed.sub(dotted.sub(data))
                    if name != info.filename:
                        moved += 1
                        parents.update(_parent_dirs(name))
                    info.filename = name
                    zout.writestr(info, data)
                # zipimport resolves namespace packages only through explicit directory entries
                for directory in sorted(parents - seen):
                    zout.writestr(directory, b"")
            tmp_archive.replace(output_path)
        finally:
            tmp_archive.unlink(missing_ok=True)
        self.log.info("Relocated %s -> %s (%d entries moved)", input_path.name, output_path.name, moved)

    @staticmethod
    def _relocate_name(name: str, dotted: _Substitution, slashed: _Substitution) -> str:
        if name.startswith(SERVICES_DIR) and len(name) > len(SERVICES_DIR):
            service = name[len(SERVICES_DIR):].encode()
            return SERVICES_DIR + dotted.sub_leading(service).decode()
        return slashed.sub_leading(name.encode()).decode()

    @staticmethod
    def _is_text(name: str) -> bool:
        if name.startswith(SERVICES_DIR):
            return True
        return Path(name).suffix.lower() in TEXT_SUFFIXES


def _parent_dirs(name: str) -> Set[str]:
    return {f"{parent}/" for parent in PurePosixPath(name).parents if str(parent) != "."}
