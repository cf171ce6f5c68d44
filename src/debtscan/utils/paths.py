"""Path helpers for on-disk artifacts."""

import re

_UNSAFE = re.compile(r"[^a-zA-Z0-9]")


def safe_file_name(path: str, suffix: str = ".json") -> str:
    """Turn an arbitrary path into a flat file name.

    Every non-alphanumeric character becomes ``_``:
    ``src/a.ts`` -> ``src_a_ts.json``.
    """
    return _UNSAFE.sub("_", path) + suffix
