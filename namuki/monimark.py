"""Monimark: a shorthand that is converted to wiki markup."""

from __future__ import annotations

import re

_INCLUDE = re.compile(r"<<((?:(?!<<|>>)))>>")


def monimark(data: str) -> str:
    """Convert monimark shorthand in ``data`` into wiki markup."""
    return _INCLUDE.sub(lambda match: f"[include({match.group(1)})]", data)