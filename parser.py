from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Tuple

from language import Command
from lexer import LaWeaParseError, Token


@dataclass(frozen=True)
class SourceLocation:
    file: str
    line: int
    column: int
    statement: str


@dataclass(frozen=True)
class Program:
    """A validated command sequence.

    ``jumps`` maps the index of every loop-start, loop-end and skip command to
    the index execution continues at when the jump is taken.
    """

    commands: Tuple[Command, ...]
    locations: Tuple[SourceLocation, ...]
    jumps: Dict[int, int]

    def __len__(self) -> int:
        return len(self.commands)


class UnmatchedLoop(LaWeaParseError):
    def __init__(self, kind: Command, index: int, location: SourceLocation) -> None:
        partner = Command.LOOP_END if kind is Command.LOOP_START else Command.LOOP_START
        if kind is Command.SKIP:
            message = f"'{kind.spelling}' (command #{index}) has no following '{Command.LOOP_END.spelling}'"
        else:
            message = f"'{kind.spelling}' (command #{index}) has no matching '{partner.spelling}'"
        super().__init__(
            f"{message} at {location.file}:{location.line}:{location.column}",
            line=location.line,
            column=location.column,
        )
        self.kind = kind
        self.index = index
        self.location = location


class Parser:
    def __init__(self, tokens: List[Token], filename: str) -> None:
        self.tokens = tokens
        self.filename = filename

    def parse(self) -> Program:
        commands = tuple(token.command for token in self.tokens)
        locations = tuple(self._location(token) for token in self.tokens)
        jumps = self._match_loops(commands, locations)
        return Program(commands=commands, locations=locations, jumps=jumps)

    def _location(self, token: Token) -> SourceLocation:
        return SourceLocation(file=self.filename, line=token.line, column=token.column, statement=token.spelling)

    def _match_loops(self, commands: Tuple[Command, ...], locations: Tuple[SourceLocation, ...]) -> Dict[int, int]:
        jumps: Dict[int, int] = {}
        open_loops: List[int] = []
        pending_skips: List[int] = []
        for index, command in enumerate(commands):
            if command is Command.LOOP_START:
                open_loops.append(index)
            elif command is Command.SKIP:
                pending_skips.append(index)
            elif command is Command.LOOP_END:
                if not open_loops:
                    raise UnmatchedLoop(command, index, locations[index])
                start = open_loops.pop()
                # Both directions land just past the partner.
                jumps[start] = index + 1
                jumps[index] = start + 1
                for skip in pending_skips:
                    jumps[skip] = index + 1
                pending_skips.clear()
        if open_loops:
            first = open_loops[0]
            raise UnmatchedLoop(Command.LOOP_START, first, locations[first])
        if pending_skips:
            first = pending_skips[0]
            raise UnmatchedLoop(Command.SKIP, first, locations[first])
        return jumps
