"""Hierarchical document parsing (YAML, and therefore JSON).

Wraps PyYAML so the rest of envyml only sees plain dicts, lists and scalars,
and so document syntax errors surface as FormatError with a line number.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol, Union, runtime_checkable

import yaml

from envyml.exceptions import FileAccessError, FormatError
from envyml.parser import check_readable


@runtime_checkable
class DocumentParser(Protocol):
    """Protocol for hierarchical document parsers."""

    def parse(self, path: Union[str, Path]) -> Any:
        """Parse the document at ``path`` into mappings, sequences and scalars."""
        ...


class YamlDocumentParser:
    """Parse YAML documents with ``yaml.safe_load``."""

    def parse(self, path: Union[str, Path]) -> Any:
        """Parse a YAML file.

        Returns:
            The document tree; an empty document yields an empty dict

        Raises:
            FileAccessError: If the file cannot be read
            FormatError: If the document is not valid YAML or its root is a
                bare scalar
        """
        file_path = check_readable(path)
        try:
            text = file_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise FileAccessError(str(path), str(exc)) from exc

        return self.parse_string(text, path=str(path))

    def parse_string(self, text: str, path: str = "env.yml") -> Any:
        """Parse YAML text; ``path`` is only used in error messages."""
        try:
            tree = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            mark = getattr(exc, "problem_mark", None)
            lineno = mark.line + 1 if mark is not None else 1
            problem = getattr(exc, "problem", None) or str(exc)
            raise FormatError(f"Invalid YAML document ({problem})", path=path, lineno=lineno) from exc

        if tree is None:
            return {}
        if not isinstance(tree, (dict, list)):
            raise FormatError("The document root must be a mapping or a sequence", path=path)
        return tree


__all__ = ["DocumentParser", "YamlDocumentParser"]
