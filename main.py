"""Rotating log demo — writes generated entries through a RotateFile until signalled."""

import logging
import os
import signal
import sys
import time
from datetime import datetime, timezone

from rotatefile import RotateFile, StreamConfig, load_config, load_yaml_config

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO"),
    format="%(asctime)s [rotatefile] %(levelname)s %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

_running = True


def _signal_handler(sig, _frame):
    global _running
    logger.info("Shutdown signal received (signal %d), stopping...", sig)
    _running = False


def generate_entry(seq: int) -> bytes:
    now = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    return f"{now} demo entry {seq} pid={os.getpid()}\n".encode()


def main():
    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    section = load_yaml_config().get("rotation")
    config = StreamConfig.from_dict(section) if section else load_config()
    logger.info(
        "Config: path=%s, max_age=%ds, max_size=%d bytes, max_backups=%d, tz=%s",
        config.path, config.max_age_seconds, config.max_size_bytes,
        config.max_backups, config.timezone or "local",
    )

    stream = RotateFile.from_config(config)
    entries_written = 0
    try:
        while _running:
            stream.write(generate_entry(entries_written))
            entries_written += 1
            time.sleep(0.05)
    except KeyboardInterrupt:
        pass

    stream.close()
    stream.join_background(timeout=10)
    logger.info("Shut down cleanly. Total entries written: %d", entries_written)


if __name__ == "__main__":
    main()
