from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Iterable, Optional, Tuple

import numpy as np


SEPARATORS = frozenset(" \t\r\n")

# Cell widths the tape knows how to store, keyed by bit count.
CELL_DTYPES: Dict[int, type] = {
    8: np.uint8,
    16: np.uint16,
    32: np.uint32,
}


class LaWeaError(Exception):
    """Base class for interpreter errors."""


class LanguageSpecError(LaWeaError):
    """Raised when the command table is malformed."""


class Command(Enum):
    DECREMENT = "maricón"
    DECREMENT_TWO = "maraco"
    INCREMENT = "weón"
    INCREMENT_TWO = "aweonao"
    ZERO = "maraca"
    MOVE_LEFT = "chucha"
    MOVE_RIGHT = "puta"
    LOOP_START = "pichula"
    LOOP_END = "tula"
    SKIP = "pico"
    PRINT_CHAR = "ctm"
    READ_CHAR = "quéweá"
    PRINT_INT = "chúpala"
    READ_INT = "brígido"
    COPY_PASTE = "perkin"
    TERMINATE = "mierda"

    @property
    def spelling(self) -> str:
        return self.value


@dataclass(frozen=True)
class LanguageSpec:
    """Immutable lookup data shared by the lexer and parser.

    ``table`` keeps the spellings in declaration order; the first entry that
    matches wins. ``alphabet`` is every code point a spelling may contain.
    """

    table: Tuple[Tuple[str, Command], ...]
    alphabet: FrozenSet[str]
    separators: FrozenSet[str] = SEPARATORS

    def is_valid_char(self, ch: str) -> bool:
        return ch in self.alphabet or ch in self.separators

    def match_at(self, text: str, index: int) -> Optional[Tuple[str, Command]]:
        for spelling, cmd in self.table:
            if text.startswith(spelling, index):
                return spelling, cmd
        return None


def check_table(table: Iterable[Tuple[str, Command]]) -> None:
    entries = list(table)
    seen: Dict[str, Command] = {}
    for spelling, cmd in entries:
        if not spelling:
            raise LanguageSpecError(f"Command {cmd.name} has an empty spelling")
        if spelling in seen:
            raise LanguageSpecError(f"Spelling '{spelling}' is already bound to {seen[spelling].name}")
        if any(ch in SEPARATORS for ch in spelling):
            raise LanguageSpecError(f"Spelling '{spelling}' contains a separator")
        seen[spelling] = cmd
    # Tokens are not delimited, so no spelling may start another.
    for spelling, cmd in entries:
        for other, other_cmd in entries:
            if other != spelling and other.startswith(spelling):
                raise LanguageSpecError(
                    f"Spelling '{spelling}' ({cmd.name}) is a prefix of '{other}' ({other_cmd.name})"
                )


def build_language(table: Iterable[Tuple[str, Command]]) -> LanguageSpec:
    entries = tuple(table)
    check_table(entries)
    alphabet = frozenset(ch for spelling, _ in entries for ch in spelling)
    return LanguageSpec(table=entries, alphabet=alphabet)


def build_default_language() -> LanguageSpec:
    return build_language((cmd.spelling, cmd) for cmd in Command)


@dataclass(frozen=True)
class InterpreterConfig:
    cell_bits: int = 8
    eof_value: int = 0

    def __post_init__(self) -> None:
        if self.cell_bits not in CELL_DTYPES:
            widths = ", ".join(str(bits) for bits in sorted(CELL_DTYPES))
            raise ValueError(f"cell_bits must be one of {widths}, got {self.cell_bits}")
        if not 0 <= self.eof_value <= self.cell_mask:
            raise ValueError(f"eof_value {self.eof_value} does not fit in a {self.cell_bits}-bit cell")

    @property
    def cell_mask(self) -> int:
        return (1 << self.cell_bits) - 1

    @property
    def dtype(self) -> type:
        return CELL_DTYPES[self.cell_bits]
