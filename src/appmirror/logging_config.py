# AppMirror — Logging configuration (rotating file + stdout)
# Author: Sachin Chhetri
# Year: 2025
# License: MIT

import logging
import logging.handlers
import os


def configure_logging(level: str = "INFO", log_dir: str = "logs", console: bool = True) -> None:
	"""Configure root logger with a rotating file handler and, optionally, stderr.

	One line per record: time, level, logger and message separated by tabs.
	Pass console=False when stdout carries machine-readable output.
	"""
	os.makedirs(log_dir, exist_ok=True)
	log_path = os.path.join(log_dir, "appmirror.log")

	fmt = "%(asctime)s\t%(levelname)s\t%(name)s\t%(message)s"

	root = logging.getLogger()
	root.setLevel(getattr(logging, level.upper(), logging.INFO))

	# Clear existing handlers in case of re-init
	for h in list(root.handlers):
		root.removeHandler(h)

	if console:
		stream = logging.StreamHandler()
		stream.setFormatter(logging.Formatter(fmt))
		root.addHandler(stream)

	file_handler = logging.handlers.RotatingFileHandler(
		log_path, maxBytes=2 * 1024 * 1024, backupCount=3, encoding="utf-8"
	)
	file_handler.setFormatter(logging.Formatter(fmt))
	root.addHandler(file_handler)

	# urllib3 logs every connection at DEBUG
	logging.getLogger("urllib3").setLevel(max(root.level, logging.INFO))
