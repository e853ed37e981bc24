"""Position fix sources: live GPS, recording and playback."""

import json
import subprocess
import time
from datetime import datetime
from typing import Optional

from .config import CONFIG
from .models import Location


class GPS:
    """Live fixes via the Termux location API"""

    def __init__(self, provider: str = "gps"):
        self.provider = provider
        self.last_location: Optional[Location] = None
        self.last_error: Optional[str] = None
        self.consecutive_failures = 0

    def _fail(self, reason: str) -> None:
        self.consecutive_failures += 1
        self.last_error = reason
        return None

    def get_location(self, timeout: int = 30) -> Optional[Location]:
        """Request a single fix from termux-location"""
        try:
            result = subprocess.run(
                ["termux-location", "-p", self.provider, "-r", "once"],
                capture_output=True,
                text=True,
                timeout=timeout
            )
        except subprocess.TimeoutExpired:
            return self._fail(f"no fix within {timeout}s")
        except FileNotFoundError:
            return self._fail("termux-location not installed")

        if result.returncode != 0:
            return self._fail(result.stderr.strip() if result.stderr else "unknown error")
        if not result.stdout or not result.stdout.strip():
            return self._fail("empty response")

        try:
            data = json.loads(result.stdout)
            location = Location(
                lat=data["latitude"],
                lon=data["longitude"],
                accuracy=data.get("accuracy"),
                timestamp=time.time()
            )
        except (json.JSONDecodeError, KeyError) as e:
            return self._fail(f"bad response: {e}")

        self.last_location = location
        self.last_error = None
        self.consecutive_failures = 0
        return location

    def get_status(self) -> str:
        if self.consecutive_failures == 0:
            acc = f", accuracy {self.last_location.accuracy:.0f}m" if self.last_location and self.last_location.accuracy else ""
            return f"GPS OK{acc}"
        return f"GPS: {self.consecutive_failures} consecutive failures ({self.last_error})"


class GPSRecorder:
    """Wraps a source and records every fix attempt for later playback"""

    def __init__(self, gps, record_path: str):
        self.gps = gps
        self.record_path = record_path
        self.trace: list[dict] = []
        self.start_time = time.time()

    def get_location(self, timeout: int = 30) -> Optional[Location]:
        location = self.gps.get_location(timeout)

        # Failed attempts are recorded too so playback keeps the same rhythm
        self.trace.append({
            "elapsed": time.time() - self.start_time,
            "location": location.to_dict() if location else None,
            "status": self.gps.get_status(),
        })
        return location

    def get_status(self) -> str:
        return self.gps.get_status()

    def save(self):
        with open(self.record_path, "w") as f:
            json.dump({
                "recorded_at": datetime.now().isoformat(),
                "trace": self.trace
            }, f, indent=2)
        print(f"GPS trace saved to {self.record_path} ({len(self.trace)} entries)")


class GPSPlayback:
    """Replays a recorded trace, one entry per poll"""

    def __init__(self, playback_path: str, speed: float = 1.0):
        self.playback_path = playback_path
        self.speed = speed
        self.index = 0
        self.last_location: Optional[Location] = None
        self.consecutive_failures = 0

        with open(playback_path) as f:
            self.trace: list[dict] = json.load(f)["trace"]
        print(f"Loaded GPS trace from {playback_path} ({len(self.trace)} entries)")

    def get_location(self, timeout: int = 30) -> Optional[Location]:
        if self.index >= len(self.trace):
            return None

        entry = self.trace[self.index]
        self.index += 1

        if not entry.get("location"):
            self.consecutive_failures += 1
            return None

        location = Location.from_dict(entry["location"])
        self.last_location = location
        self.consecutive_failures = 0
        return location

    def get_poll_interval(self) -> float:
        """Recorded gap to the next entry, scaled by speed and clamped to 0.1-5 s"""
        if self.index <= 0 or self.index >= len(self.trace):
            return CONFIG["gps_poll_interval"] / self.speed

        delta = self.trace[self.index].get("elapsed", 0) - self.trace[self.index - 1].get("elapsed", 0)
        return max(0.1, min(delta / self.speed, 5.0))

    def is_finished(self) -> bool:
        return self.index >= len(self.trace)

    def get_status(self) -> str:
        progress = f"{self.index}/{len(self.trace)}"
        if self.consecutive_failures == 0:
            return f"Playback OK ({progress})"
        return f"Playback: {self.consecutive_failures} failures ({progress})"
