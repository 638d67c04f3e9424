from __future__ import annotations

import logging
from typing import Optional, Union

from gbfspulse.config.models import LoggingSettings


# Connection-pool chatter from requests/urllib3 drowns out the per-snapshot summaries at DEBUG.
_NOISY_LOGGERS = ("urllib3", "urllib3.connectionpool")


def resolve_level(level: Union[str, int]) -> int:
    """Accept a level name (`debug`, `WARNING`) or a number (`10`, `"20"`)."""

    if isinstance(level, int):
        return level
    text = level.strip()
    if text.isdigit():
        return int(text)
    resolved = logging.getLevelName(text.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Invalid log level: {level}")
    return resolved


def build_handlers(settings: LoggingSettings) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if settings.file is not None:
        settings.file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(settings.file, encoding="utf-8"))
    return handlers


def configure_logging(
    settings: LoggingSettings,
    *,
    level: Optional[Union[str, int]] = None,
    force: bool = False,
) -> int:
    """
    Configure the root logger and return the effective level.

    `level` overrides `settings.level` (the CLI's `--log-level`). An already configured root logger
    is left alone unless `force` is set, so repeated app construction does not stack handlers.
    """

    resolved = resolve_level(level if level is not None else settings.level)

    if force or not logging.getLogger().handlers:
        logging.basicConfig(level=resolved, format=settings.format, handlers=build_handlers(settings), force=force)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved, logging.INFO))
    return resolved
