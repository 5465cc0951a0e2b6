# filmshare/observability/logger.py

# structured JSON logger
import logging
import os
import sys

from pythonjsonlogger import jsonlogger


def _build_formatter() -> logging.Formatter:
    return jsonlogger.JsonFormatter(
        fmt="%(asctime)s %(levelname)s %(name)s %(message)s %(pathname)s %(lineno)d",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )


def configure_logging(config_module) -> None:
    """Configure root logging and align existing loggers to JSON formatting.

    - Keeps existing business log calls intact.
    - Reuses the access/error file handlers, but switches them to JSON format.
    - Adds a JSON console handler (stdout) at LOG_LEVEL.
    """
    level = getattr(logging, getattr(config_module, "LOG_LEVEL", "INFO"), logging.INFO)
    root = logging.getLogger()
    root.setLevel(level)

    formatter = _build_formatter()

    os.makedirs(getattr(config_module, "LOGS_PATH", "logs"), exist_ok=True)

    # Replace formatters on the file handlers set up by filmshare.utils.logger
    for logger_name in ("access", "error"):
        lg = logging.getLogger(logger_name)
        lg.setLevel(logging.INFO if logger_name == "access" else logging.ERROR)
        lg.propagate = False  # keep file routing stable
        for h in lg.handlers:
            h.setFormatter(formatter)

    # Single JSON console handler on root
    have_console = any(
        isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        for h in root.handlers
    )
    if not have_console:
        console = logging.StreamHandler(stream=sys.stdout)
        console.setLevel(level)
        console.setFormatter(formatter)
        root.addHandler(console)

    logging.getLogger("startup").info("logging configured", extra={"log_level": logging.getLevelName(level)})
