from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional

from language import Command, LanguageSpec, LaWeaError, build_default_language


class LaWeaParseError(LaWeaError):
    """Raised when source text is rejected before execution."""

    def __init__(self, message: str, *, line: int, column: int) -> None:
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column


class InvalidCharacter(LaWeaParseError):
    def __init__(self, char: str, *, filename: str, line: int, column: int) -> None:
        super().__init__(
            f"Invalid character '{char}' (U+{ord(char):04X}) at {filename}:{line}:{column}",
            line=line,
            column=column,
        )
        self.char = char


class UnknownCommand(LaWeaParseError):
    def __init__(self, text: str, *, filename: str, line: int, column: int) -> None:
        super().__init__(f"Unknown command '{text}' at {filename}:{line}:{column}", line=line, column=column)
        self.text = text


@dataclass(frozen=True)
class Token:
    command: Command
    line: int
    column: int

    @property
    def spelling(self) -> str:
        return self.command.spelling


class Lexer:
    def __init__(self, text: str, filename: str, language: Optional[LanguageSpec] = None) -> None:
        self.text = text
        self.filename = filename
        self.language = language or build_default_language()
        self.index = 0
        self.line = 1
        self.column = 1

    def tokenize(self) -> List[Token]:
        tokens: List[Token] = []
        separators = self.language.separators
        text = self.text
        n = len(text)

        while self.index < n:
            if text[self.index] in separators:
                self._advance()
                continue
            tokens.extend(self._consume_word())
        return tokens

    def _consume_word(self) -> List[Token]:
        # A word may hold several spellings back to back; since no spelling
        # is a prefix of another, matching greedily is unambiguous.
        line, col = self.line, self.column
        word = self._read_word()
        tokens: List[Token] = []
        offset = 0
        while offset < len(word):
            match = self.language.match_at(word, offset)
            if match is None:
                raise UnknownCommand(word[offset:], filename=self.filename, line=line, column=col + offset)
            spelling, command = match
            tokens.append(Token(command, line, col + offset))
            offset += len(spelling)
        return tokens

    def _read_word(self) -> str:
        chars: List[str] = []
        language = self.language
        text = self.text
        n = len(text)
        while self.index < n:
            ch = text[self.index]
            if ch in language.separators:
                break
            if not language.is_valid_char(ch):
                raise InvalidCharacter(ch, filename=self.filename, line=self.line, column=self.column)
            chars.append(ch)
            self._advance()
        return "".join(chars)

    def _advance(self) -> None:
        if self.text[self.index] == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.index += 1
