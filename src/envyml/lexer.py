"""Expression lexer and resolver for dotenv-syntax values.

A value is a sequence of segments concatenated until an unquoted newline:

- ``'single quoted'``: literal text, no escapes, no expansion
- ``"double quoted"``: ``\\"``, ``\\r`` and ``\\n`` unescaped, then variables
  and commands expanded, then ``\\\\`` collapsed to ``\\``
- unquoted: like double quoted, but whitespace must not survive unexpanded
  and a ``#`` preceded by a blank starts a trailing comment

Variables are ``$NAME`` or ``${NAME}``; commands are ``$(...)`` with
balanced parentheses.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from envyml.commands import CommandRunner
from envyml.environment import EnvironmentStore
from envyml.exceptions import CommandExecutionError, FormatError
from envyml.logger import Logger, create_logger

VARNAME_PATTERN = r"[A-Za-z][A-Za-z0-9_]*"

VARIABLE_REGEX = re.compile(
    r"""
    (?<!\\)
    (?P<backslashes>\\*)        # escaped with a backslash?
    \$
    (?!\()                      # not a command
    (?P<opening_brace>\{)?
    (?P<name>""" + VARNAME_PATTERN + r""")?
    (?P<closing_brace>\})?
    """,
    re.VERBOSE,
)

# Nothing but blanks and an optional comment up to the end of the line
EMPTY_VALUE_REGEX = re.compile(r"[ \t]*(?:#.*)?$", re.MULTILINE)

TRAILING_LINE_TERMINATORS = re.compile(r"[\r\n]+$")

BLANKS = (" ", "\t")


@dataclass
class ParseCursor:
    """Position inside the text being parsed.

    Only lives for the duration of a single ``parse`` call.
    """

    data: str
    path: str = ".env"
    position: int = 0

    @property
    def end(self) -> int:
        return len(self.data)

    @property
    def lineno(self) -> int:
        return self.data.count("\n", 0, self.position) + 1

    def at_end(self) -> bool:
        return self.position >= len(self.data)

    def peek(self, offset: int = 0) -> str:
        """Character at ``position + offset``, or "" outside the data."""
        index = self.position + offset
        if 0 <= index < len(self.data):
            return self.data[index]
        return ""

    def advance(self, count: int = 1) -> None:
        self.position += count

    def skip_blank_lines(self) -> None:
        """Skip whitespace, newlines and full-line comments."""
        data = self.data
        while self.position < len(data):
            char = data[self.position]
            if char.isspace():
                self.position += 1
            elif char == "#":
                newline = data.find("\n", self.position)
                self.position = len(data) if newline == -1 else newline
            else:
                break

    def current_line(self) -> str:
        start = self.data.rfind("\n", 0, self.position) + 1
        stop = self.data.find("\n", self.position)
        return self.data[start:] if stop == -1 else self.data[start:stop]

    def error(self, message: str) -> FormatError:
        return FormatError(message, path=self.path, lineno=self.lineno, context=self.current_line())


def find_closing_parenthesis(text: str, open_index: int) -> Optional[int]:
    """Return the index of the ``)`` balancing the ``(`` at ``open_index``."""
    depth = 0
    for index in range(open_index, len(text)):
        char = text[index]
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return index
    return None


class ExpressionResolver:
    """Turn one raw dotenv value into its final text.

    Args:
        store: Environment consulted for names not defined in the file
        command_runner: Executes ``$(...)`` substitutions. When None, any
            command substitution raises CommandExecutionError.
        logger: Optional logger instance
    """

    def __init__(
        self,
        store: Optional[EnvironmentStore] = None,
        command_runner: Optional[CommandRunner] = None,
        logger: Optional[Logger] = None,
    ) -> None:
        self.store = store
        self.command_runner = command_runner
        self.logger = logger or create_logger(name="envyml.lexer")

    def resolve_value(self, cursor: ParseCursor, values: Mapping[str, str]) -> str:
        """Lex the value at the cursor and resolve it.

        The cursor ends up past the value, its trailing newline and any blank
        or comment lines that follow.

        Args:
            cursor: Cursor positioned right after the ``=`` sign
            values: Variables already defined earlier in the same file

        Raises:
            FormatError: On any grammar violation
            CommandExecutionError: If a command substitution fails
        """
        empty = EMPTY_VALUE_REGEX.match(cursor.data, cursor.position)
        if empty:
            cursor.advance(len(empty.group(0)))
            cursor.skip_blank_lines()
            return ""

        if cursor.peek() in BLANKS:
            raise cursor.error("Whitespace are not supported before the value")

        value = ""
        while True:
            char = cursor.peek()
            if char == "'":
                value += self._lex_single_quoted(cursor)
            elif char == '"':
                value += self._lex_double_quoted(cursor, values)
            else:
                segment, comment_follows = self._lex_unquoted(cursor, values)
                value += segment
                if comment_follows:
                    break

            if cursor.at_end() or cursor.peek() == "\n":
                break

        cursor.skip_blank_lines()
        return value

    def _lex_single_quoted(self, cursor: ParseCursor) -> str:
        cursor.advance()
        start = cursor.position
        while True:
            char = cursor.peek()
            if char in ("", "\n"):
                raise cursor.error("Missing quote to end the value")
            if char == "'":
                break
            cursor.advance()

        text = cursor.data[start:cursor.position]
        cursor.advance()
        return text

    def _lex_double_quoted(self, cursor: ParseCursor, values: Mapping[str, str]) -> str:
        cursor.advance()
        start = cursor.position
        while True:
            if cursor.at_end():
                raise cursor.error("Missing quote to end the value")
            if cursor.peek() == '"' and not (cursor.peek(-1) == "\\" and cursor.peek(-2) != "\\"):
                break
            cursor.advance()

        raw = cursor.data[start:cursor.position]
        cursor.advance()
        text = raw.replace('\\"', '"').replace("\\r", "\r").replace("\\n", "\n")
        return self._expand(text, values, cursor)

    def _lex_unquoted(self, cursor: ParseCursor, values: Mapping[str, str]) -> Tuple[str, bool]:
        """Lex an unquoted segment.

        Returns:
            The resolved segment and whether a trailing comment starts next
        """
        chars = []
        prev = cursor.peek(-1)
        while not cursor.at_end():
            char = cursor.peek()
            if char in ("\n", '"', "'"):
                break
            if char == "#" and prev in BLANKS:
                break

            if char == "\\" and cursor.peek(1) in ('"', "'"):
                cursor.advance()
                char = cursor.peek()

            chars.append(char)
            prev = char

            if char == "$" and cursor.peek(1) == "(":
                cursor.advance()
                chars.append("(" + self._lex_nested_expression(cursor) + ")")

            cursor.advance()

        raw = "".join(chars).rstrip()
        resolved = self._expand(raw, values, cursor)

        if resolved == raw and re.search(r"\s", raw):
            raise cursor.error("A value containing spaces must be surrounded by quotes")

        return resolved, cursor.peek() == "#"

    def _lex_nested_expression(self, cursor: ParseCursor) -> str:
        """Consume a balanced ``(...)``; the cursor stops on the closing paren."""
        cursor.advance()
        start = cursor.position
        depth = 1
        while True:
            char = cursor.peek()
            if char in ("", "\n"):
                raise cursor.error("Missing closing parenthesis.")
            if char == "(":
                depth += 1
            elif char == ")":
                depth -= 1
                if depth == 0:
                    return cursor.data[start:cursor.position]
            cursor.advance()

    def _expand(self, text: str, values: Mapping[str, str], cursor: ParseCursor) -> str:
        text = self.resolve_variables(text, values, cursor)
        text = self.resolve_commands(text, values, cursor)
        return text.replace("\\\\", "\\")

    def resolve_variables(self, text: str, values: Mapping[str, str], cursor: ParseCursor) -> str:
        """Replace ``$NAME`` and ``${NAME}`` references in ``text``."""
        if "$" not in text:
            return text

        def replace(match: "re.Match[str]") -> str:
            backslashes = match.group("backslashes")
            # odd number of backslashes means the $ character is escaped
            if len(backslashes) % 2 == 1:
                return match.group(0)[1:]

            name = match.group("name")
            if name is None:
                return match.group(0)

            opening = match.group("opening_brace")
            closing = match.group("closing_brace")
            if opening and not closing:
                raise cursor.error("Unclosed braces on variable expansion")

            resolved = self.lookup(name, values)
            if closing and not opening:
                resolved += "}"
            return backslashes + resolved

        return VARIABLE_REGEX.sub(replace, text)

    def lookup(self, name: str, values: Mapping[str, str]) -> str:
        """Value of ``name``: this file first, then the environment, else ""."""
        if name in values:
            return values[name]
        if self.store is not None:
            return self.store.lookup(name)
        return ""

    def resolve_commands(self, text: str, values: Mapping[str, str], cursor: ParseCursor) -> str:
        """Replace every ``$(...)`` in ``text`` with the command's output."""
        if "$(" not in text:
            return text

        parts = []
        index = 0
        while True:
            start = text.find("$(", index)
            if start == -1:
                parts.append(text[index:])
                break

            escaped = start > index and text[start - 1] == "\\"
            close = find_closing_parenthesis(text, start + 1)

            if close is None:
                if escaped:
                    parts.append(text[index:start - 1])
                    parts.append(text[start:])
                    break
                raise cursor.error("Missing closing parenthesis.")

            if escaped:
                parts.append(text[index:start - 1])
                parts.append(text[start:close + 1])
            elif close == start + 2:
                # "$()" is not a command
                parts.append(text[index:close + 1])
            else:
                parts.append(text[index:start])
                parts.append(self._run_command(text[start + 2:close], values, cursor))
            index = close + 1

        return "".join(parts)

    def _run_command(self, command: str, values: Mapping[str, str], cursor: ParseCursor) -> str:
        if self.command_runner is None:
            raise CommandExecutionError(
                "Resolving commands requires a command runner.",
                code="COMMAND_UNSUPPORTED",
                details={"path": cursor.path, "line": cursor.lineno},
            )

        self.logger.debug("Expanding command", path=cursor.path, line=cursor.lineno)
        result = self.command_runner.run(command, dict(values))
        if not result.success:
            raise CommandExecutionError(
                f"Issue expanding a command ({result.stderr.strip()})",
                details={
                    "path": cursor.path,
                    "line": cursor.lineno,
                    "returncode": result.returncode,
                },
            )

        return TRAILING_LINE_TERMINATORS.sub("", result.stdout)


__all__ = [
    "VARNAME_PATTERN",
    "ParseCursor",
    "ExpressionResolver",
    "find_closing_parenthesis",
]
