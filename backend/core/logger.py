# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Logging for the tracker API.

Handlers and formats live in etc/logging.conf.  Two things come from
Settings instead: where the rotating log file goes (``LOG_FILE``, default
<project>/log/app.log) and how chatty the ``tracker`` logger is
(``LOG_LEVEL``).

    from core.logger import logger
"""

import configparser
import io
import logging
import logging.config
from pathlib import Path

from core.config import settings

_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_LOGGING_CONF = _PROJECT_ROOT / "etc" / "logging.conf"

_log_file = Path(settings.log_file) if settings.log_file else _PROJECT_ROOT / "log" / "app.log"
_log_file.parent.mkdir(parents=True, exist_ok=True)

# The file handler's args hold a %(log_file)s placeholder.  Format strings
# contain %(asctime)s and friends, hence RawConfigParser.
_parser = configparser.RawConfigParser()
_parser.read_file(io.StringIO(
    _LOGGING_CONF.read_text(encoding="utf-8").replace("%(log_file)s", _log_file.as_posix())
))
_parser.set("logger_tracker", "level", settings.log_level.upper())

logging.config.fileConfig(_parser, disable_existing_loggers=False)

logger = logging.getLogger("tracker")
