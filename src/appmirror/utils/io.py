# AppMirror — IO helpers (JSON-lines export of scraped records)
# Author: Sachin Chhetri
# Year: 2025
# License: MIT

import json
import os
import threading
from typing import Any


_jsonl_lock = threading.Lock()


def ensure_parent_dir(path: str) -> None:
	parent = os.path.dirname(os.path.abspath(path))
	os.makedirs(parent, exist_ok=True)


def append_jsonl(path: str, obj: Any) -> None:
	"""Append one record per line; non-ASCII (app names, descriptions) is kept as is."""
	with _jsonl_lock:
		with open(path, "a", encoding="utf-8") as f:
			f.write(json.dumps(obj, ensure_ascii=False) + "\n")
