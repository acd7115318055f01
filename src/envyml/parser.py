"""Declaration parser for dotenv-syntax files.

Two states alternate over the whole (newline-normalized) text:

- NAME: optional ``export`` prefix, a variable name, then ``=``
- VALUE: delegated to the expression resolver

Later declarations of the same name overwrite earlier ones. A file that ends
right after ``NAME=`` defines an empty value.
"""

from __future__ import annotations

import enum
import os
import re
from pathlib import Path
from typing import Dict, Optional, Union

from envyml.exceptions import FileAccessError
from envyml.lexer import VARNAME_PATTERN, ExpressionResolver, ParseCursor
from envyml.logger import Logger, create_logger

DECLARATION_REGEX = re.compile(r"(?P<export>export[ \t]+)?(?P<name>" + VARNAME_PATTERN + r")")

VARNAME_REGEX = re.compile(VARNAME_PATTERN + r"\Z")


class ParserState(enum.Enum):
    NAME = 0
    VALUE = 1


def is_valid_name(name: str) -> bool:
    """Return True if ``name`` is usable as a variable name."""
    return bool(VARNAME_REGEX.match(name))


def check_readable(path: Union[str, Path]) -> Path:
    """Return ``path`` as a Path, or raise FileAccessError.

    Raises:
        FileAccessError: If the path is missing, a directory or unreadable
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileAccessError(str(path), "file does not exist")
    if file_path.is_dir():
        raise FileAccessError(str(path), "path is a directory")
    if not os.access(file_path, os.R_OK):
        raise FileAccessError(str(path), "permission denied")
    return file_path


class DotenvParser:
    """Parse dotenv-syntax text into an ordered name/value mapping.

    Example:
        parser = DotenvParser(ExpressionResolver())
        parser.parse('A=foo\\nB="$A-bar"\\n')
        # {'A': 'foo', 'B': 'foo-bar'}
    """

    def __init__(
        self,
        resolver: Optional[ExpressionResolver] = None,
        logger: Optional[Logger] = None,
    ) -> None:
        self.resolver = resolver or ExpressionResolver()
        self.logger = logger or create_logger(name="envyml.parser")

    def parse(self, data: str, path: str = ".env") -> Dict[str, str]:
        """Parse the contents of a dotenv file.

        Args:
            data: File contents
            path: File name used in error messages

        Returns:
            Variables in declaration order

        Raises:
            FormatError: When the text has a syntax error; nothing is returned
                for a file that fails part-way
            CommandExecutionError: When a command substitution fails
        """
        cursor = ParseCursor(data.replace("\r\n", "\n").replace("\r", "\n"), path=path)
        values: Dict[str, str] = {}
        state = ParserState.NAME
        name = ""

        cursor.skip_blank_lines()

        while not cursor.at_end():
            if state is ParserState.NAME:
                name = self._lex_name(cursor)
                state = ParserState.VALUE
            else:
                values[name] = self.resolver.resolve_value(cursor, values)
                state = ParserState.NAME

        if state is ParserState.VALUE:
            values[name] = ""

        self.logger.debug("Parsed dotenv data", path=path, variables=len(values))
        return values

    def parse_file(self, path: Union[str, Path]) -> Dict[str, str]:
        """Read and parse a dotenv file.

        Raises:
            FileAccessError: If the file cannot be read
            FormatError: When the file has a syntax error
        """
        file_path = check_readable(path)
        try:
            data = file_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise FileAccessError(str(path), str(exc)) from exc
        return self.parse(data, path=str(path))

    def _lex_name(self, cursor: ParseCursor) -> str:
        match = DECLARATION_REGEX.match(cursor.data, cursor.position)
        if not match:
            raise cursor.error("Invalid character in variable name")
        cursor.advance(len(match.group(0)))

        char = cursor.peek()
        if char in ("", "\n", "#"):
            if match.group("export"):
                raise cursor.error("Unable to unset an environment variable")
            raise cursor.error("Missing = in the environment variable declaration")

        if char in (" ", "\t"):
            raise cursor.error("Whitespace characters are not supported after the variable name")

        if char != "=":
            raise cursor.error("Missing = in the environment variable declaration")
        cursor.advance()

        return match.group("name")


__all__ = [
    "DotenvParser",
    "ParserState",
    "check_readable",
    "is_valid_name",
]
