"""
Minimal ``.env`` reader used to build the process configuration.

Files hold one ``KEY=VALUE`` pair per line; blank lines and ``#`` comments are
ignored. Values already present in the target mapping always win, so a
variable exported by the shell (or an earlier line of the same file) is never
replaced by a later one.
"""

import logging
import os
from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Mapping, MutableMapping, Optional, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


def read_env_file(path: PathLike) -> Dict[str, str]:
    """Parse ``path`` into a dict, keeping the first value seen for each key."""
    env_path = Path(path)
    if not env_path.is_file():
        logger.debug("No env file at %s, skipping", env_path)
        return {}

    values: Dict[str, str] = {}
    with open(env_path, "r", encoding="utf-8") as f:
        for line_no, raw_line in enumerate(f, start=1):
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue
            key, sep, value = line.partition("=")
            key = key.strip()
            if not sep or not key:
                logger.warning("Skipping line %d in %s: expected KEY=VALUE", line_no, env_path)
                continue
            # Values are taken verbatim: no quotes, escapes or inline comments
            values.setdefault(key, value.strip())
    return values


def load_env_file(path: PathLike, target: MutableMapping[str, str]) -> List[str]:
    """Merge the pairs from ``path`` into ``target`` without overwriting.

    Returns the keys that were added, in file order. Calling it again with the
    same file is a no-op.
    """
    added: List[str] = []
    for key, value in read_env_file(path).items():
        if key in target:
            continue
        target[key] = value
        added.append(key)
    if added:
        logger.debug("Loaded %d variable(s) from %s", len(added), path)
    return added


def build_environment(
    env_file: PathLike, base: Optional[Mapping[str, str]] = None
) -> Mapping[str, str]:
    """Return a read-only view of ``base`` (default ``os.environ``) plus ``env_file``."""
    merged: Dict[str, str] = dict(os.environ if base is None else base)
    load_env_file(env_file, merged)
    return MappingProxyType(merged)
