"""Reading La Weá source files."""

from __future__ import annotations
from dataclasses import dataclass

from language import LaWeaError


class SourceNotFound(LaWeaError):
    """Raised when the source file cannot be opened or read."""

    def __init__(self, filename: str, reason: str) -> None:
        super().__init__(f"Failed to read {filename}: {reason}")
        self.filename = filename
        self.reason = reason


@dataclass(frozen=True)
class SourceText:
    filename: str
    text: str

    def __len__(self) -> int:
        return len(self.text)

    def __iter__(self):
        return iter(self.text)


def decode_source(path: str) -> SourceText:
    try:
        with open(path, "rb") as handle:
            raw = handle.read()
    except OSError as exc:
        raise SourceNotFound(path, exc.strerror or str(exc)) from exc
    # Undecodable bytes become U+FFFD, which the lexer rejects with a position.
    return SourceText(filename=path, text=raw.decode("utf-8-sig", errors="replace"))
