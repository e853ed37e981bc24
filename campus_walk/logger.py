"""Run log for Campus Walk: timestamped events with structured data."""

import json
import time
from collections import Counter
from datetime import datetime
from typing import Optional, Callable

from .config import CONFIG


class Logger:
    """Writes `[timestamp] message | {json}` lines to stdout and an optional log file.

    Every entry is also handed to `callback(message, data)` when one is set,
    and counted per message in `counts`.
    """

    def __init__(self, log_path: Optional[str] = None, callback: Optional[Callable] = None,
                 echo: bool = True, title: str = "Campus Walk"):
        self.log_path = log_path
        self.callback = callback
        self.echo = echo
        self.counts: Counter = Counter()
        self.last_state_time = 0.0
        self.file = open(log_path, "a") if log_path else None
        if self.file:
            self.file.write(f"\n{'='*60}\n{title} Log - {datetime.now().isoformat()}\n{'='*60}\n\n")
            self.file.flush()

    def log(self, message: str, data: Optional[dict] = None):
        self.counts[message] += 1
        entry = f"[{datetime.now().isoformat()}] {message}"
        if data:
            entry += f" | {json.dumps(data, default=str)}"
        if self.echo:
            print(entry)
        if self.file:
            self.file.write(entry + "\n")
            self.file.flush()
        if self.callback:
            self.callback(message, data)

    def state(self, data: dict, force: bool = False) -> bool:
        """STATE snapshot, at most once per log_interval seconds unless forced"""
        now = time.time()
        if not force and now - self.last_state_time < CONFIG["log_interval"]:
            return False
        self.last_state_time = now
        self.log("STATE", data)
        return True

    def close(self):
        if self.file:
            self.file.close()
            self.file = None
