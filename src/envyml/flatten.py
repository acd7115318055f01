"""Flatten a hierarchical document into environment-style names.

    {"Vendor": {"SSO": {"Secret": "x"}}, "Hosts": ["a", "b"]}

becomes

    {"Vendor_SSO_Secret": "x", "Hosts_0": "a", "Hosts_1": "b"}

Keys are derived structurally and are not validated. When two paths produce
the same flat key the one later in document order wins, while the key keeps
the position where it was first produced.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

SEPARATOR = "_"


def promote_root_key(tree: Any, root_key: Optional[str]) -> Any:
    """Hoist the children of ``tree[root_key]`` to the top level.

    Only applies when ``tree`` is a mapping and ``root_key`` holds a non-empty
    mapping. Promoted children overwrite top-level keys of the same name.
    The input is left untouched.
    """
    if not root_key or not isinstance(tree, Mapping):
        return tree

    nested = tree.get(root_key)
    if not isinstance(nested, Mapping) or not nested:
        return tree

    promoted = dict(tree)
    del promoted[root_key]
    for key, value in nested.items():
        promoted[key] = value
    return promoted


def scalar_to_string(value: Any) -> str:
    """Textual form of a scalar leaf."""
    if value is None or value is False:
        return ""
    if value is True:
        return "1"
    return str(value)


def flatten(tree: Any, root_key: Optional[str] = None, separator: str = SEPARATOR) -> Dict[str, str]:
    """Flatten ``tree`` into a single-level name/value mapping.

    Args:
        tree: Parsed document (mappings, sequences and scalars)
        root_key: Top-level key whose children are promoted to the root
        separator: String joining path segments

    Returns:
        Flat mapping in first-seen key order
    """
    result: Dict[str, str] = {}
    # A bare scalar (or an empty document) has no names to derive
    if isinstance(tree, (Mapping, list, tuple)):
        _flatten_into(result, promote_root_key(tree, root_key), "", separator)
    return result


def _flatten_into(result: Dict[str, str], node: Any, prefix: str, separator: str) -> None:
    if isinstance(node, Mapping):
        items = ((str(key), value) for key, value in node.items())
    elif isinstance(node, (list, tuple)):
        items = ((str(index), value) for index, value in enumerate(node))
    else:
        result[prefix] = scalar_to_string(node)
        return

    for segment, value in items:
        _flatten_into(result, value, f"{prefix}{separator}{segment}" if prefix else segment, separator)


__all__ = ["flatten", "promote_root_key", "scalar_to_string", "SEPARATOR"]
