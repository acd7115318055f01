"""Loader for envyml's own settings.

Settings are read in deterministic order:
1) .env file (if provided and exists)
2) OS environment variables
3) Explicit overrides (highest precedence)

This reads plain KEY=VALUE settings with python-dotenv. Configuration files
meant for the application go through ``envyml.parser`` instead.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, MutableMapping, Optional

from dotenv import dotenv_values


class EnvLoader:
    """Load environment-style key/value pairs with .env support."""

    def __init__(self, env_file: Optional[Path | str] = None) -> None:
        self.env_file = Path(env_file) if env_file else None

    def load(
        self,
        overrides: Optional[Mapping[str, str]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> MutableMapping[str, str]:
        """Merge .env file, environment and overrides (low -> high)."""
        data: MutableMapping[str, str] = {}

        if self.env_file is not None and self.env_file.is_file():
            file_values = dotenv_values(self.env_file)
            data.update({k: v for k, v in file_values.items() if v is not None})

        data.update(os.environ if environ is None else environ)

        if overrides:
            data.update({k: str(v) for k, v in overrides.items()})

        return data


__all__ = ["EnvLoader"]
