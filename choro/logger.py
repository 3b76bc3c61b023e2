from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

LOG_DIR = Path("logs")


def setup_logging(
    log_dir: Union[str, Path] = LOG_DIR,
    level: int = logging.INFO,
) -> Path:
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    logfile = log_dir / "choro.log"
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.FileHandler(logfile),
            logging.StreamHandler(),
        ],
    )
    return logfile
