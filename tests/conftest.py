"""
Test helpers for the La Weá interpreter.

- run: lex, parse and execute a source string against in-memory IO,
  returning the interpreter (for tape/clipboard inspection) and the output.
  Pass ``output=[]`` to inspect what was printed before an error.
"""

import io
from typing import Callable, List, Optional, Tuple

import pytest

from interpreter import Interpreter
from language import InterpreterConfig


def _run(
    source: str,
    stdin: str = "",
    config: Optional[InterpreterConfig] = None,
    output: Optional[List[str]] = None,
) -> Tuple[Interpreter, str]:
    sink: List[str] = [] if output is None else output
    stream = io.StringIO(stdin)
    interpreter = Interpreter(
        source=source,
        filename="<test>",
        config=config,
        input_provider=lambda: stream.read(1),
        output_sink=sink.append,
    )
    interpreter.run()
    return interpreter, "".join(sink)


@pytest.fixture
def run() -> Callable[..., Tuple[Interpreter, str]]:
    return _run
