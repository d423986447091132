"""
Line-oriented KEY=value store of produced addresses and scalar parameters.

The file is read with python-dotenv so the same format can be edited by hand,
and appended to (never rewritten) by the pipeline:

    # ===== TaiVault =====
    TAI_VAULT_ADDRESS=0x...
"""

import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Union

from dotenv import dotenv_values

logger = logging.getLogger(__name__)

KEY_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class ConfigStore:
    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def __repr__(self):
        return f"ConfigStore({str(self.path)!r})"

    def load(self) -> Dict[str, str]:
        """Current entries in file order; keys without a value are left out."""
        if not self.path.exists():
            return {}
        entries = dotenv_values(self.path, interpolate=False)
        return {key: value for key, value in entries.items() if value is not None}

    def snapshot(self) -> Dict[str, str]:
        return dict(self.load())

    def get(self, key: str) -> Optional[str]:
        return self.load().get(key)

    def keys(self) -> List[str]:
        return list(self.load())

    def __contains__(self, key) -> bool:
        return key in self.load()

    def __len__(self):
        return len(self.load())

    def append(self, key: str, value: str, section: Optional[str] = None) -> None:
        """
        Appends one entry, optionally preceded by a section marker.

        This does not check for an existing key; callers go through
        PersistenceWriter for that.
        """
        if not KEY_PATTERN.match(key):
            raise ValueError(f"Invalid config store key: {key!r}")
        value = str(value)
        if "\n" in value or "\r" in value:
            raise ValueError(f"Config store value for {key} must be a single line")

        self.path.parent.mkdir(parents=True, exist_ok=True)
        lead = ""
        if self.path.exists() and self.path.stat().st_size > 0:
            with open(self.path, "rb") as f:
                f.seek(-1, 2)
                if f.read(1) != b"\n":
                    lead = "\n"

        lines = [lead]
        if section:
            lines.append(f"\n# ===== {section} =====\n")
        lines.append(f"{key}={value}\n")
        with open(self.path, "a", encoding="utf-8") as f:
            f.write("".join(lines))
        logger.debug(f"Appended {key} to {self.path}")
