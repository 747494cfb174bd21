"""Store password resolution.

The password is looked up once at startup through an ordered list of sources:
the file written by the Vault agent sidecar, then an environment variable.
The first source that yields a value wins. When none does, the password is
empty and a warning is logged; connection errors then surface later through
the store.
"""
from __future__ import annotations

import os
import logging
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Sequence, Tuple

from access_counter.config import Settings

logger = logging.getLogger(__name__)

SOURCE_FILE = "file"
SOURCE_ENV = "env"
SOURCE_NONE = "none"

Strategy = Tuple[str, Callable[[], Optional[str]]]


@dataclass(frozen=True)
class ResolvedCredential:
    value: str
    source: str

    def __repr__(self) -> str:
        # never leak the secret through logs or tracebacks
        return f"ResolvedCredential(value=<{len(self.value)} chars>, source={self.source!r})"


def read_secret_file(path: str) -> Optional[str]:
    """Return the stripped file content, or None if the file cannot be read."""
    try:
        with open(path, "rb") as fh:
            raw = fh.read()
    except OSError as e:
        logger.debug(f"Secret file {path} not readable: {e}")
        return None
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        logger.warning(
            f"Secret file {path} is not valid UTF-8 ({e.reason} at byte {e.start}); "
            "undecodable bytes were replaced and the password will likely be rejected"
        )
        text = raw.decode("utf-8", errors="replace")
    # templating tools usually leave a trailing newline
    return text.strip()


def read_secret_env(name: str, environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """Return the variable verbatim; unset and empty are both treated as missing."""
    env = os.environ if environ is None else environ
    value = env.get(name)
    if not value:
        return None
    return value


def default_strategies(settings: Settings, environ: Optional[Mapping[str, str]] = None) -> Sequence[Strategy]:
    return (
        (SOURCE_FILE, lambda: read_secret_file(settings.secret_file)),
        (SOURCE_ENV, lambda: read_secret_env(settings.password_env, environ)),
    )


def resolve_credential(
    settings: Settings,
    environ: Optional[Mapping[str, str]] = None,
    strategies: Optional[Sequence[Strategy]] = None,
) -> ResolvedCredential:
    """Resolve the store password, logging which source supplied it."""
    if strategies is None:
        strategies = default_strategies(settings, environ)
    for source, strategy in strategies:
        value = strategy()
        if value is None:
            continue
        if source == SOURCE_FILE:
            logger.info(f"Loaded Redis password from secret file {settings.secret_file}")
        elif source == SOURCE_ENV:
            logger.info(f"Loaded Redis password from environment variable {settings.password_env}")
        else:
            logger.info(f"Loaded Redis password from {source}")
        return ResolvedCredential(value=value, source=source)

    logger.warning(
        f"No Redis password found (checked {settings.secret_file} and {settings.password_env})"
    )
    return ResolvedCredential(value="", source=SOURCE_NONE)
