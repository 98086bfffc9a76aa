from __future__ import annotations
import sys
import numpy as np
from dataclasses import dataclass
from typing import Any, Callable, List, Optional
from numpy.typing import NDArray

from language import Command, InterpreterConfig, LanguageSpec, LaWeaError, build_default_language
from lexer import Lexer
from parser import Parser, Program, SourceLocation


INITIAL_TAPE_SIZE = 1024
MAX_CODE_POINT = 0x10FFFF
SURROGATES = range(0xD800, 0xE000)


class LaWeaRuntimeError(LaWeaError):
    """Raised for runtime faults."""

    def __init__(
        self,
        message: str,
        *,
        location: Optional[SourceLocation] = None,
        command: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.location = location
        self.command = command
        self.step_index: Optional[int] = None


class TapeUnderflow(LaWeaRuntimeError):
    def __init__(self) -> None:
        super().__init__("Cannot move left of the first cell")


class MalformedIntegerInput(LaWeaRuntimeError):
    def __init__(self, text: str) -> None:
        super().__init__(f"Expected a decimal integer on input but got '{text}'")
        self.text = text


class UnprintableCharacter(LaWeaRuntimeError):
    def __init__(self, value: int) -> None:
        super().__init__(f"Cell value {value} is not a valid code point")
        self.value = value


class Tape:
    """Unsigned fixed-width cells, unbounded to the right.

    The backing array doubles whenever the cursor walks off its end.
    """

    def __init__(self, config: InterpreterConfig, size: int = INITIAL_TAPE_SIZE) -> None:
        self.mask = config.cell_mask
        self.cells: NDArray[Any] = np.zeros(size, dtype=config.dtype)
        self.cursor = 0

    def __len__(self) -> int:
        return len(self.cells)

    def __getitem__(self, index: int) -> int:
        if index < 0:
            raise IndexError(index)
        if index >= len(self.cells):
            return 0
        return int(self.cells[index])

    def get(self) -> int:
        return int(self.cells[self.cursor])

    def set(self, value: int) -> None:
        # Python ints wrap here so numpy never sees an out-of-range value.
        self.cells[self.cursor] = value & self.mask

    def add(self, delta: int) -> None:
        self.set(self.get() + delta)

    def move_left(self) -> None:
        if self.cursor == 0:
            raise TapeUnderflow()
        self.cursor -= 1

    def move_right(self) -> None:
        self.cursor += 1
        if self.cursor >= len(self.cells):
            self.cells = np.concatenate((self.cells, np.zeros(len(self.cells), dtype=self.cells.dtype)))


class Clipboard:
    def __init__(self) -> None:
        self.value: Optional[int] = None

    @property
    def holding(self) -> bool:
        return self.value is not None

    def copy_or_paste(self, tape: Tape) -> None:
        if self.value is None:
            self.value = tape.get()
            return
        tape.set(self.value)
        self.value = None


class InputReader:
    """Character and integer reads on top of a one-character provider.

    The provider returns a single character, or ``""`` once input is exhausted.
    """

    def __init__(self, provider: Callable[[], str]) -> None:
        self.provider = provider

    def read_char(self) -> Optional[str]:
        ch = self.provider()
        return ch if ch != "" else None

    def read_token(self) -> Optional[str]:
        ch = self.provider()
        while ch != "" and ch.isspace():
            ch = self.provider()
        if ch == "":
            return None
        chars: List[str] = []
        # The whitespace that ends the token is consumed with it.
        while ch != "" and not ch.isspace():
            chars.append(ch)
            ch = self.provider()
        return "".join(chars)

    def read_int(self) -> Optional[int]:
        token = self.read_token()
        if token is None:
            return None
        digits = token[1:] if token[:1] in ("+", "-") else token
        if not (digits.isascii() and digits.isdigit()):
            raise MalformedIntegerInput(token)
        return int(token, 10)


@dataclass
class StateEntry:
    step_index: int
    instruction_index: int
    source_location: Optional[SourceLocation]
    statement: Optional[str]


class StateLogger:
    """Counts executed steps and remembers the latest one for diagnostics."""

    def __init__(self) -> None:
        self.next_state_index = 0
        self.last_instruction: Optional[int] = None
        self.program: Optional[Program] = None

    def reset(self, program: Program) -> None:
        self.program = program
        self.next_state_index = 0
        self.last_instruction = None

    def record(self, instruction_index: int) -> None:
        self.last_instruction = instruction_index
        self.next_state_index += 1

    @property
    def last_entry(self) -> Optional[StateEntry]:
        if self.program is None or self.last_instruction is None:
            return None
        location = self.program.locations[self.last_instruction]
        return StateEntry(
            step_index=self.next_state_index - 1,
            instruction_index=self.last_instruction,
            source_location=location,
            statement=location.statement,
        )


def _default_output(text: str) -> None:
    print(text, end="", flush=True)


class Interpreter:
    def __init__(
        self,
        *,
        source: str,
        filename: str,
        config: Optional[InterpreterConfig] = None,
        language: Optional[LanguageSpec] = None,
        input_provider: Optional[Callable[[], str]] = None,
        output_sink: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.source = source
        self.filename = filename
        self.config = config or InterpreterConfig()
        self.language = language or build_default_language()
        self.input_provider = input_provider or (lambda: sys.stdin.read(1))
        self.output_sink = output_sink or _default_output
        self.reader = InputReader(self.input_provider)
        self.logger = StateLogger()
        self.program: Optional[Program] = None
        self.tape = Tape(self.config)
        self.clipboard = Clipboard()

    def parse(self) -> Program:
        lexer = Lexer(self.source, self.filename, self.language)
        tokens = lexer.tokenize()
        parser = Parser(tokens, self.filename)
        return parser.parse()

    def run(self) -> None:
        # Parse errors surface before a single command runs.
        program = self.parse()
        try:
            self.execute(program)
        except LaWeaRuntimeError:
            raise
        except Exception as exc:
            # Convert unexpected Python-level exceptions so callers can
            # format them like any other runtime fault.
            entry = self.logger.last_entry
            wrapped = LaWeaRuntimeError(
                f"Internal interpreter error: {exc}",
                location=entry.source_location if entry else None,
                command="internal",
            )
            if entry:
                wrapped.step_index = entry.step_index
            raise wrapped from exc

    def execute(self, program: Program) -> None:
        self.program = program
        self.tape = tape = Tape(self.config)
        self.clipboard = clipboard = Clipboard()
        self.logger.reset(program)
        record = self.logger.record
        read_char = self.reader.read_char
        read_int = self.reader.read_int
        emit = self.output_sink
        eof_value = self.config.eof_value
        commands = program.commands
        jumps = program.jumps
        n = len(commands)

        ip = 0
        try:
            while ip < n:
                command = commands[ip]
                record(ip)
                if command is Command.INCREMENT:
                    tape.add(1)
                elif command is Command.DECREMENT:
                    tape.add(-1)
                elif command is Command.MOVE_RIGHT:
                    tape.move_right()
                elif command is Command.MOVE_LEFT:
                    tape.move_left()
                elif command is Command.LOOP_START:
                    if tape.get() == 0:
                        ip = jumps[ip]
                        continue
                elif command is Command.LOOP_END:
                    if tape.get() != 0:
                        ip = jumps[ip]
                        continue
                elif command is Command.INCREMENT_TWO:
                    tape.add(2)
                elif command is Command.DECREMENT_TWO:
                    tape.add(-2)
                elif command is Command.ZERO:
                    tape.set(0)
                elif command is Command.SKIP:
                    ip = jumps[ip]
                    continue
                elif command is Command.PRINT_CHAR:
                    value = tape.get()
                    if value > MAX_CODE_POINT or value in SURROGATES:
                        raise UnprintableCharacter(value)
                    emit(chr(value))
                elif command is Command.READ_CHAR:
                    ch = read_char()
                    tape.set(eof_value if ch is None else ord(ch))
                elif command is Command.PRINT_INT:
                    emit(str(tape.get()))
                elif command is Command.READ_INT:
                    number = read_int()
                    tape.set(eof_value if number is None else number)
                elif command is Command.COPY_PASTE:
                    clipboard.copy_or_paste(tape)
                elif command is Command.TERMINATE:
                    break
                ip += 1
        except LaWeaRuntimeError as error:
            entry = self.logger.last_entry
            if entry is not None:
                if error.location is None:
                    error.location = entry.source_location
                if error.command is None:
                    error.command = entry.statement
                error.step_index = entry.step_index
            raise


@dataclass
class TracebackFrame:
    name: str
    location: Optional[SourceLocation]
    statement: Optional[str]
    state_entry: Optional[StateEntry]


class TracebackFormatter:
    def __init__(self, interpreter: Interpreter) -> None:
        self.interpreter = interpreter

    def build_frame(self, error: LaWeaRuntimeError) -> TracebackFrame:
        entry = self.interpreter.logger.last_entry
        location = error.location or (entry.source_location if entry else None)
        return TracebackFrame(
            name="<program>",
            location=location,
            statement=location.statement if location else None,
            state_entry=entry,
        )

    def format_text(self, error: LaWeaRuntimeError) -> str:
        lines = ["Traceback (most recent call last):"]
        frame = self.build_frame(error)
        if frame.location:
            lines.append(
                f"  File \"{frame.location.file}\", line {frame.location.line}, "
                f"column {frame.location.column}, in {frame.name}"
            )
            if frame.statement:
                lines.append(f"    {frame.statement}")
        else:
            lines.append(f"  <unknown location> in {frame.name}")
        if frame.state_entry:
            lines.append(
                f"    Step: {frame.state_entry.step_index}  Instruction: {frame.state_entry.instruction_index}"
            )
        command = error.command or "runtime"
        lines.append(f"{error.__class__.__name__}: {error.message} (command: {command})")
        return "\n".join(lines)

