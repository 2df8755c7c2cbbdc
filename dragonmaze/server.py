"""
project: Dragon Maze
module: server.py
License: MIT

Server bootstrap: logging setup and the development HTTP server.
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from flask import Flask

from dragonmaze import create_app
from dragonmaze.logging_utils import log

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def start_server(host="0.0.0.0", port=5000, debug: bool = False):  # pragma: no cover (runtime only)
    """Configure logging and serve the maze API until interrupted."""
    app = create_app()
    _configure_logging(app)
    log.info(event="server_start", host=host, port=port, debug=debug)
    app.run(host=host, port=port, debug=debug)


def _configure_logging(app: Flask):
    """Configure logging to both console and a rotating file in instance/.

    The file path will be instance/app.log. Retains a few backups to avoid growth.
    """
    log_dir = app.instance_path
    try:
        os.makedirs(log_dir, exist_ok=True)
    except OSError:
        pass
    log_path = os.path.join(log_dir, "app.log")

    root = logging.getLogger()
    root.setLevel(logging.INFO)

    file_handler = RotatingFileHandler(log_path, maxBytes=1_000_000, backupCount=3)
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))

    console = logging.StreamHandler()
    console.setLevel(logging.INFO)
    console.setFormatter(logging.Formatter(LOG_FORMAT))

    # Avoid duplicate handlers if reconfigured
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()

    root.addHandler(file_handler)
    root.addHandler(console)
    return log_path
