"""Queue worker command line.

Usage:
    jobpipeline-worker --app myapp.pipelines:runtime --connection redis --queue default
    jobpipeline-worker --app myapp.pipelines:create_runtime --once
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys

from jobpipeline.core.logging_setup import configure_logging
from jobpipeline.runtime import Runtime

logger = logging.getLogger(__name__)


def load_runtime(target: str) -> Runtime:
    """Load ``module:attr``, where attr is a Runtime or a zero-argument factory of one."""
    module_name, _, attr = target.partition(":")
    if not module_name or not attr:
        raise ValueError(f"--app must look like 'package.module:attribute', got {target!r}")
    obj = getattr(importlib.import_module(module_name), attr)
    if not isinstance(obj, Runtime):
        obj = obj()
    if not isinstance(obj, Runtime):
        raise TypeError(f"{target} did not produce a Runtime")
    return obj


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="jobpipeline-worker", description="Run queued job pipelines.")
    parser.add_argument("--app", required=True, help="module:attribute of the application Runtime")
    parser.add_argument("--connection", default=None, help="queue connection (default from settings)")
    parser.add_argument("--queue", default=None, help="queue name (default from settings)")
    parser.add_argument("--once", action="store_true", help="process at most one message and exit")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    runtime = load_runtime(args.app)
    configure_logging(runtime.settings)
    logger.info(
        "Worker starting on %s/%s",
        args.connection or runtime.settings.pipeline.default_connection,
        args.queue or runtime.settings.pipeline.default_queue,
    )
    try:
        processed = runtime.worker().work(args.connection, args.queue, once=args.once)
    except KeyboardInterrupt:
        logger.info("Worker interrupted")
        return 130
    logger.info("Worker stopped after %d message(s)", processed)
    return 0


if __name__ == "__main__":
    sys.exit(main())
