#!/usr/bin/env python3
# crucible/config.py
"""
Search settings.

Resolution order (later wins):
- defaults below
- ENV: CRUCIBLE_CACHE_KEY, CRUCIBLE_EARLY_EXIT, CRUCIBLE_MAX_EXPANSIONS,
       CRUCIBLE_HEURISTIC, CRUCIBLE_LOG_LEVEL
- CLI: --cache-key=full|heading, --early-exit=1, --max-expansions=N,
       --heuristic=0|1, --log-level=DEBUG
"""

import logging
import os
import sys
from dataclasses import dataclass, replace
from typing import Dict, List, Mapping, Optional

from crucible.core.dominance import KEY_POLICIES
from crucible.core.errors import InvalidParameter

ENV_PREFIX = "CRUCIBLE_"
_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    cache_key: str = "full"
    early_exit: bool = False
    max_expansions: Optional[int] = None
    use_heuristic: bool = True
    log_level: str = "WARNING"


def _as_bool(name: str, raw: str) -> bool:
    v = raw.strip().lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    raise InvalidParameter(f"{name}: expected a boolean, got {raw!r}")


def check_log_level(raw: str) -> str:
    level = raw.strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise InvalidParameter(f"log_level: unknown level {level!r}")
    return level


def _parse(values: Dict[str, str], base: Settings) -> Settings:
    s = base
    if "cache_key" in values:
        key = values["cache_key"].strip().lower()
        if key not in KEY_POLICIES:
            raise InvalidParameter(f"cache_key: expected one of {KEY_POLICIES}, got {key!r}")
        s = replace(s, cache_key=key)
    if "early_exit" in values:
        s = replace(s, early_exit=_as_bool("early_exit", values["early_exit"]))
    if "heuristic" in values:
        s = replace(s, use_heuristic=_as_bool("heuristic", values["heuristic"]))
    if "max_expansions" in values:
        raw = values["max_expansions"].strip()
        if raw.lower() in ("", "none"):
            s = replace(s, max_expansions=None)
        else:
            try:
                n = int(raw)
            except ValueError:
                raise InvalidParameter(f"max_expansions: expected an integer, got {raw!r}") from None
            if n <= 0:
                raise InvalidParameter(f"max_expansions must be positive, got {n}")
            s = replace(s, max_expansions=n)
    if "log_level" in values:
        s = replace(s, log_level=check_log_level(values["log_level"]))
    return s


def resolve_settings(argv: Optional[List[str]] = None,
                     env: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if env is None else env
    argv = sys.argv[1:] if argv is None else argv

    from_env = {}
    for k, v in env.items():
        if k.startswith(ENV_PREFIX):
            from_env[k[len(ENV_PREFIX):].lower()] = v
    settings = _parse(from_env, Settings())

    from_cli = {}
    for arg in argv:
        if arg.startswith("--") and "=" in arg:
            k, v = arg[2:].split("=", 1)
            from_cli[k.replace("-", "_")] = v
    return _parse(from_cli, settings)


_configured = False


def configure_logging(level: str = "WARNING") -> None:
    """basicConfig once per process; later calls only adjust the level."""
    global _configured
    numeric = getattr(logging, level.upper(), logging.WARNING)
    if not _configured:
        logging.basicConfig(level=numeric, format=LOG_FORMAT)
        _configured = True
    logging.getLogger().setLevel(numeric)
