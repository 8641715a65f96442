"""
Logging setup for the dbtestsupport CLI.

Console output goes to stderr (coloured when it is a terminal) so decoded SQL
on stdout stays clean; an optional log file always receives DEBUG.
"""

import logging
import sys
from pathlib import Path

RESET = "\033[0m"

LEVEL_COLORS = {
    logging.DEBUG: "\033[2m",
    logging.INFO: "\033[36m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[91m",
    logging.CRITICAL: "\033[1;41m",
}

CONSOLE_FORMAT = "[%(asctime)s] %(levelname)s [%(name)s] %(message)s"
FILE_FORMAT = "[%(asctime)s] %(levelname)-8s [%(name)s] %(message)s"


class ColoredFormatter(logging.Formatter):
    """Formatter that colours the level name; the record itself is left untouched."""

    def __init__(self, fmt: str, datefmt: str | None = None, use_colors: bool = True):
        super().__init__(fmt, datefmt)
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_colors:
            return super().format(record)
        # Other handlers share the record, so colour a copy
        colored = logging.makeLogRecord(record.__dict__)
        color = LEVEL_COLORS.get(record.levelno, "")
        colored.levelname = f"{color}{record.levelname:8}{RESET}"
        return super().format(colored)


def setup_logging(
    level: int = logging.INFO,
    log_file: str | Path | None = None,
    use_colors: bool | None = None,
) -> None:
    """
    Configure process-wide logging.

    Args:
        level: Console logging level
        log_file: Optional log file (always DEBUG)
        use_colors: Force colours on/off; default follows stderr.isatty()
    """
    if use_colors is None:
        use_colors = sys.stderr.isatty()

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(ColoredFormatter(CONSOLE_FORMAT, "%H:%M:%S", use_colors))
    console.setLevel(level)
    handlers: list[logging.Handler] = [console]

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, "%Y-%m-%d %H:%M:%S"))
        file_handler.setLevel(logging.DEBUG)
        handlers.append(file_handler)

    # Root passes everything; handlers filter
    logging.basicConfig(level=logging.DEBUG, handlers=handlers, force=True)
    logging.getLogger(__name__).debug(
        "Logging initialized (console %s, file %s)",
        logging.getLevelName(level),
        log_file or "none",
    )
