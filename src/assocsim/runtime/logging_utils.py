"""
Per-run log files.

Every scenario run gets its own file under ``logs/`` (relative to the working
directory unless a directory is given). Stage messages go to the file;
warnings also reach stderr.
"""

import logging
import re
from datetime import datetime
from pathlib import Path

_FILE_FORMAT = "%(asctime)s %(levelname)s %(message)s"
_STREAM_FORMAT = "%(levelname)s %(message)s"


def _detach_handlers(logger):
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        try:
            handler.close()
        except Exception:
            pass


def _resolve_log_dir(log_dir):
    if log_dir is not None:
        text = str(log_dir).strip()
        if text:
            return Path(text).expanduser()
    return Path.cwd() / "logs"


def _log_file_name(run_label=None):
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    if not run_label:
        return f"run_{stamp}.log"
    label = re.sub(r"[^A-Za-z0-9_-]+", "_", str(run_label)).strip("_")
    return f"run_{stamp}_{label}.log" if label else f"run_{stamp}.log"


def setup_run_logger(log_dir=None, name="assocsim", run_label=None, quiet=False):
    """Attach a fresh file handler (and a stderr warning handler) to ``name``.

    Returns the logger and the log file path as a string. ``quiet`` keeps
    only warnings in the file.
    """
    resolved_log_dir = _resolve_log_dir(log_dir)
    resolved_log_dir.mkdir(parents=True, exist_ok=True)
    log_path = resolved_log_dir / _log_file_name(run_label)

    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    _detach_handlers(logger)

    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setLevel(logging.WARNING if quiet else logging.INFO)
    file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
    logger.addHandler(file_handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(logging.WARNING)
    stream_handler.setFormatter(logging.Formatter(_STREAM_FORMAT))
    logger.addHandler(stream_handler)

    return logger, str(log_path)


def close_run_logger(logger):
    _detach_handlers(logger)
