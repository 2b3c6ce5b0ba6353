"""Demo entry point: starts the logging subsystem and emits sample records until stopped."""

import logging
import os
import random
import signal
import sys
import time
from argparse import ArgumentParser

from logpipe.bootstrap import install_excepthook, start_logging
from logpipe.config import load_config
from logpipe.errors import ConfigError
from logpipe.frontend import create_logger

logger = logging.getLogger("postium_mail")

_running = True
_stop_signal = None


def _signal_handler(sig, _frame):
    # No logging here: the interrupted main thread may hold a sink lock.
    global _running, _stop_signal
    _stop_signal = sig
    _running = False


FRONTEND_CONTEXTS = ["App", "Email", "Account", "UI", "Store"]
FRONTEND_MESSAGES = [
    "Folder list rendered",
    "Selected message",
    "Compose dialog opened",
    "Store hydrated from cache",
]


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(prog="logpipe", description="Run the dual-source log pipeline demo.")
    parser.add_argument("--config", help="YAML config file with a 'logging' section")
    parser.add_argument("--log-dir", help="Override the log directory")
    parser.add_argument("--debug", action="store_true", help="Mirror records to stdout")
    parser.add_argument("--interval", type=float, default=1.0, help="Seconds between sample records")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    env = {}
    if args.log_dir:
        env["LOG_DIR"] = args.log_dir
    if args.debug:
        env["LOG_CONSOLE"] = "true"

    try:
        config = load_config(args.config, env={**os.environ, **env})
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    subsystem = start_logging(config)
    install_excepthook(subsystem.pipeline)
    ui_loggers = [create_logger(ctx, subsystem.pipeline) for ctx in FRONTEND_CONTEXTS]
    logger.info("Postium Mail application started")

    emitted = 0
    try:
        while _running:
            random.choice(ui_loggers).info(random.choice(FRONTEND_MESSAGES))
            logger.info("Synced mailbox (%d records so far)", emitted)
            emitted += 2
            time.sleep(args.interval)
    except KeyboardInterrupt:
        pass

    if _stop_signal is not None:
        logger.info("Shutdown signal received (signal %d), stopping...", _stop_signal)
    logger.info("Shut down cleanly. Total sample records: %d", emitted)
    subsystem.shutdown()
    return 0


if __name__ == "__main__":
    sys.exit(main())
