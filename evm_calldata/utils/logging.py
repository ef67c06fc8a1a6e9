import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# chatty at DEBUG and irrelevant to encoding output
NOISY_LOGGERS = ("web3", "urllib3", "asyncio")


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    quiet: Sequence[str] = NOISY_LOGGERS
) -> logging.Logger:
    """Route evm_calldata logs to stderr and, optionally, a file"""
    level = getattr(logging, log_level.upper())
    formatter = logging.Formatter(LOG_FORMAT)

    # stdout carries the encoded result only
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    for name in quiet:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    return root
