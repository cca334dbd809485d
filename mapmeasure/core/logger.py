"""
Logging for mapmeasure.

setup_logging() installs handlers once, at CLI or host-app start; library code
only calls get_logger(). Lines logged on behalf of a measurement session carry
its id and current mode:

    2026-01-01 12:00:00 [INFO] mapmeasure.tools.measurement [map-1#2 area] finished ...
"""
import logging
import os
from pathlib import Path
from typing import Optional, Union

from .config import ENV_LOG_DIR, ENV_LOG_LEVEL

ROOT_NAME = "mapmeasure"
LOG_FILE_NAME = "mapmeasure.log"
DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s%(context)s %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# record attributes rendered into %(context)s, in this order
CONTEXT_FIELDS = ("session", "mode")

# handlers added by setup_logging; None until it has run
_installed: Optional[list] = None


class MapMeasureFormatter(logging.Formatter):
    """Renders the session context of a record as " [map-1#2 area]"; empty for plain records."""

    def __init__(self, fmt: Optional[str] = None, datefmt: Optional[str] = None):
        super().__init__(fmt=fmt or DEFAULT_FORMAT, datefmt=datefmt or _DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        parts = [str(getattr(record, name)) for name in CONTEXT_FIELDS if getattr(record, name, None)]
        record.context = " [%s]" % " ".join(parts) if parts else ""
        return super().format(record)


class SessionAdapter(logging.LoggerAdapter):
    """
    Adds the session fields in self.extra to every record. The dict is read on
    each call, so a session that switches mode updates extra["mode"] in place.
    """

    def process(self, msg, kwargs):
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs


def _resolve_level(level: Union[int, str, None]) -> int:
    if level is None:
        level = os.environ.get(ENV_LOG_LEVEL, "").strip() or logging.INFO
    if isinstance(level, str):
        value = logging.getLevelName(level.upper())
        return value if isinstance(value, int) else logging.INFO
    return level


def _log_path(log_file, log_dir) -> Optional[Path]:
    if log_file is not None:
        return Path(log_file)
    log_dir = log_dir or os.environ.get(ENV_LOG_DIR)
    return Path(log_dir) / LOG_FILE_NAME if log_dir else None


def setup_logging(
    level: Union[int, str, None] = None,
    log_file: Optional[os.PathLike | str] = None,
    log_dir: Optional[os.PathLike | str] = None,
    format_string: Optional[str] = None,
    use_console: bool = True,
) -> None:
    """
    Attach console and file handlers to the "mapmeasure" logger.

    level is a number or a name ("DEBUG"); default MAPMEASURE_LOG_LEVEL, else INFO.
    The file is log_file, else <log_dir or MAPMEASURE_LOG_DIR>/mapmeasure.log,
    else there is none. Later calls do nothing until reset_logging().
    """
    global _installed
    if _installed is not None:
        return

    level = _resolve_level(level)
    formatter = MapMeasureFormatter(format_string)
    handlers: list[logging.Handler] = []
    if use_console:
        handlers.append(logging.StreamHandler())
    path = _log_path(log_file, log_dir)
    if path is not None:
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding="utf-8"))

    root = logging.getLogger(ROOT_NAME)
    root.setLevel(level)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root.addHandler(handler)
    _installed = handlers


def reset_logging() -> None:
    """Detach and close the handlers setup_logging added; handlers added by a host stay."""
    global _installed
    root = logging.getLogger(ROOT_NAME)
    for handler in _installed or ():
        root.removeHandler(handler)
        handler.close()
    _installed = None


def get_logger(name: str) -> logging.Logger:
    """Return a logger under mapmeasure.* (e.g. mapmeasure.geodesy)."""
    if name != ROOT_NAME and not name.startswith(ROOT_NAME + "."):
        name = f"{ROOT_NAME}.{name}"
    return logging.getLogger(name)


def get_session_logger(logger: logging.Logger, session_id: str, mode: Optional[str] = None) -> SessionAdapter:
    """Adapter that tags every line of logger with session_id and mode."""
    return SessionAdapter(logger, {"session": session_id, "mode": mode})
