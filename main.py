"""Rolling log demo service: generates log lines into a RollingWriter."""

import argparse
import dataclasses
import logging
import random
import signal
import sys
import time
from datetime import datetime, timezone

from rollinglog.config import load_config, load_yaml_config
from rollinglog.scanner import list_backups
from rollinglog.writer import RollingWriter

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [rollinglog] %(levelname)s %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

_running = True


def _signal_handler(sig, _frame):
    global _running
    logger.info("Shutdown signal received (signal %d), stopping...", sig)
    _running = False


LEVELS = ["INFO", "INFO", "INFO", "DEBUG", "WARN"]


def generate_entry(seq: int = 0) -> bytes:
    now = datetime.now(timezone.utc)
    timestamp = now.strftime("%Y-%m-%d %H:%M:%S.") + f"{now.microsecond // 1000:03d}"
    # Vary the line length.
    padding = "." * random.randint(0, 40)
    return f"{timestamp} [{random.choice(LEVELS)}] entry {seq} {padding}\n".encode()


def write_entry(writer: RollingWriter, seq: int) -> bool:
    """Write one demo entry. Returns True if the write rotated the file."""
    before = writer.size
    written = writer.write(generate_entry(seq))
    # A rotation restarts the size counter at this entry's length.
    return writer.size < before + written


def build_cli_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Rolling log demo writer")
    parser.add_argument("--config", default=None, help="Path to YAML config file")
    parser.add_argument("--log-file", default=None, help="Active log file path")
    parser.add_argument("--max-bytes", type=int, default=None,
                        help="Rotate before the file exceeds this size (0 = never)")
    parser.add_argument("--max-backups", type=int, default=None,
                        help="Backups to keep (0 = unlimited)")
    parser.add_argument("--max-age-days", type=int, default=None,
                        help="Days to keep backups (0 = unlimited)")
    parser.add_argument("--compress", action="store_true", default=None,
                        help="Gzip rotated backups")
    parser.add_argument("--localtime", action="store_true", default=None,
                        help="Use local time in backup names instead of UTC")
    parser.add_argument("--interval", type=float, default=0.05,
                        help="Seconds between generated entries")
    return parser


def config_from_args(args):
    config = load_config(
        load_yaml_config(args.config),
        error_handler=lambda err: logger.error("Sweep error: %s", err),
    )
    overrides = {
        "filename": args.log_file,
        "max_bytes": args.max_bytes,
        "max_backups": args.max_backups,
        "max_age_days": args.max_age_days,
        "compress": args.compress,
        "localtime": args.localtime,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    return dataclasses.replace(config, **overrides)


def main(argv=None):
    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    args = build_cli_parser().parse_args(argv)
    config = config_from_args(args)
    logger.info(
        "Config: file=%s, max_bytes=%d, max_backups=%d, max_age=%dd, compress=%s, localtime=%s",
        config.filename, config.max_bytes, config.max_backups,
        config.max_age_days, config.compress, config.localtime,
    )

    writer = RollingWriter(config)
    entries_written = 0
    rotations = 0

    try:
        while _running:
            if write_entry(writer, entries_written):
                rotations += 1
                logger.info(
                    "Rotation %d after %d entries, %d backup(s) on disk",
                    rotations, entries_written, len(list_backups(config.filename)),
                )
            entries_written += 1
            time.sleep(args.interval)
    except KeyboardInterrupt:
        pass
    finally:
        writer.close()

    logger.info(
        "Shut down cleanly. Entries written: %d, rotations: %d",
        entries_written, rotations,
    )


if __name__ == "__main__":
    main()
