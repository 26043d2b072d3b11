"""Config sources exposing one hosts list per role file."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Protocol, Sequence


class ConfigSource(Protocol):
    """Named line-oriented lists, one per role file."""

    def exists(self, name: str) -> bool:
        ...

    def read_lines(self, name: str) -> List[str]:
        ...

    def write_lines(self, name: str, lines: Sequence[str]) -> None:
        ...


def parse_hosts(lines: Iterable[str]) -> List[str]:
    """Strip whitespace, drop blank and ``#`` lines; keep order and duplicates."""
    hosts: List[str] = []
    for raw in lines:
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        hosts.append(line)
    return hosts


class DirectoryConfigSource:
    """Hosts files stored in a configuration directory."""

    def __init__(self, conf_dir: Path) -> None:
        self.conf_dir = Path(conf_dir)

    def path_for(self, name: str) -> Path:
        return self.conf_dir / name

    def exists(self, name: str) -> bool:
        return self.path_for(name).is_file()

    def read_lines(self, name: str) -> List[str]:
        return self.path_for(name).read_text(encoding="utf-8").splitlines()

    def write_lines(self, name: str, lines: Sequence[str]) -> None:
        self.conf_dir.mkdir(parents=True, exist_ok=True)
        body = "".join(f"{line}\n" for line in lines)
        self.path_for(name).write_text(body, encoding="utf-8")

    def __repr__(self) -> str:
        return f"DirectoryConfigSource({str(self.conf_dir)!r})"


class MemoryConfigSource:
    """In-memory config source, handy for embedding and tests."""

    def __init__(self, files: Mapping[str, Sequence[str]] | None = None) -> None:
        self.files: Dict[str, List[str]] = {
            name: list(lines) for name, lines in (files or {}).items()
        }
        self.writes: List[str] = []

    def exists(self, name: str) -> bool:
        return name in self.files

    def read_lines(self, name: str) -> List[str]:
        return list(self.files[name])

    def write_lines(self, name: str, lines: Sequence[str]) -> None:
        self.files[name] = list(lines)
        self.writes.append(name)
