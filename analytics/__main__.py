from __future__ import annotations

import logging

from .app import run_app
from .config import load_config


def main() -> None:
    config = load_config()
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    run_app(config)


if __name__ == "__main__":
    main()
