from __future__ import annotations

import logging
from pathlib import Path
import sys

import flet as ft

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def run(**app_kwargs) -> None:
    from grid_app.config import load_config
    from grid_app.ui import main

    config = load_config()
    configure_logging(config.log_level)
    ft.app(target=lambda page: main(page, config), **app_kwargs)


if __name__ == "__main__":
    project_root = Path(__file__).resolve().parent.parent
    if str(project_root) not in sys.path:
        sys.path.insert(0, str(project_root))
    run()
