"""
Attendance Matcher - Main Entry Point

Loads students' reference descriptors and serves the matching API.
"""

import argparse
import dataclasses
import os
import sys
from pathlib import Path
from typing import List, Optional

from .app import create_app
from .attendance import AttendanceMarker
from .config import Config, load_config
from .events import backend_listener
from .logging_config import setup_logging, get_logger
from .references import load_matcher

logger = get_logger(__name__)


def _load_local_env() -> None:
    """Load environment variables from attendance_matcher/.env if present."""
    env_path = Path(__file__).resolve().parent / '.env'
    if not env_path.exists():
        return

    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith('#') or '=' not in line:
            continue
        key, value = line.split('=', 1)
        os.environ.setdefault(key.strip(), value.strip())


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Attendance Matcher - Face Descriptor Matching Service'
    )

    parser.add_argument(
        '--backend-url',
        type=str,
        help='Backend API URL (or set BACKEND_URL)'
    )

    parser.add_argument(
        '--port',
        type=int,
        help='HTTP port for the matching API (or set API_PORT)'
    )

    parser.add_argument(
        '--threshold',
        type=float,
        help='Match distance threshold (or set MATCH_THRESHOLD)'
    )

    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )

    args = parser.parse_args(argv)

    if args.threshold is not None and args.threshold <= 0:
        parser.error('--threshold must be positive.')

    return args


def build_config(args: argparse.Namespace) -> Config:
    """Apply command line overrides on top of environment configuration."""
    config = load_config()
    overrides = {}

    if args.backend_url:
        overrides['backend_url'] = args.backend_url.rstrip('/')
    if args.port is not None:
        overrides['api_port'] = args.port
    if args.threshold is not None:
        overrides['match_threshold'] = args.threshold
    if args.debug:
        overrides['debug_mode'] = True

    return dataclasses.replace(config, **overrides)


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    _load_local_env()
    args = parse_args(argv)

    try:
        config = build_config(args)
    except ValueError as e:
        print(f'Invalid configuration: {e}', file=sys.stderr)
        sys.exit(2)

    setup_logging(
        config.service_name,
        config.debug_mode,
        log_file=config.log_file,
        max_bytes=config.log_max_bytes,
        backup_count=config.log_backup_count
    )

    logger.info('=' * 60)
    logger.info('Attendance Matcher')
    logger.info('=' * 60)
    logger.info(f'Backend: {config.backend_url}')
    logger.info(f'Match threshold: {config.match_threshold}')
    logger.info(f'Compare threshold: {config.compare_threshold}')
    logger.info(f'Port: {config.api_port}')
    logger.info('=' * 60)

    try:
        matcher = load_matcher(config)

        if len(matcher) == 0:
            logger.warning('No students with face descriptors found, every query will be unknown')

        marker = AttendanceMarker(listeners=[backend_listener(config)])
        app = create_app(
            config,
            matcher,
            marker=marker,
            loader=lambda: load_matcher(config)
        )

        app.run(
            host='0.0.0.0',
            port=config.api_port,
            threaded=True,
            debug=False,
            use_reloader=False
        )

    except KeyboardInterrupt:
        logger.info('Received keyboard interrupt, shutting down...')
        sys.exit(0)
    except Exception as e:
        logger.error(f'Fatal error: {e}', exc_info=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
