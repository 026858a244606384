#!/usr/bin/env python3
"""
Memory Match - Main Entry Point

A card matching game with a browser front end and a terminal front end.
"""

import argparse
import logging
import sys
from pathlib import Path
from memory_match.runtime import MemoryMatchRuntime


def setup_logging(level: str) -> None:
    """
    Configure logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
    """
    log_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=log_format,
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='Memory Match - Card matching game',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                          # Run with both web and console front ends
  %(prog)s --no-web                 # Terminal only
  %(prog)s --no-console             # Browser only
  %(prog)s --web-port 8080          # Use custom web port
  %(prog)s --difficulty hard        # Start on hard
  %(prog)s --log-level DEBUG        # Enable debug logging
        """
    )

    parser.add_argument(
        '--no-web',
        action='store_true',
        help='Disable browser front end'
    )

    parser.add_argument(
        '--no-console',
        action='store_true',
        help='Disable terminal front end'
    )

    parser.add_argument(
        '--host',
        default='0.0.0.0',
        help='Web server host (default: 0.0.0.0)'
    )

    parser.add_argument(
        '--web-port',
        type=int,
        default=5000,
        help='Web server port (default: 5000)'
    )

    parser.add_argument(
        '--difficulty',
        choices=['easy', 'medium', 'hard'],
        help='Starting difficulty (default: last used)'
    )

    parser.add_argument(
        '--settings-file',
        type=Path,
        help='Settings file (default: data/.settings.yml)'
    )

    parser.add_argument(
        '--log-level',
        default='WARNING',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level (default: WARNING)'
    )

    args = parser.parse_args()

    # Setup logging
    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    # Validate arguments
    if args.no_web and args.no_console:
        logger.error("Cannot disable both web and console front ends!")
        sys.exit(1)

    # Print banner
    print("=" * 60)
    print("  Memory Match")
    print("  Version 1.0.0")
    print("=" * 60)
    print()

    if not args.no_web:
        print(f"✓ Web front end: ENABLED (http://{args.host}:{args.web_port})")
    else:
        print("✗ Web front end: DISABLED")

    if not args.no_console:
        print("✓ Console front end: ENABLED (type 'help')")
    else:
        print("✗ Console front end: DISABLED")

    print()
    print("Press Ctrl+C to exit")
    print("=" * 60)
    print()

    # Create and start runtime
    try:
        runtime = MemoryMatchRuntime(
            enable_web=not args.no_web,
            enable_console=not args.no_console,
            web_host=args.host,
            web_port=args.web_port,
            settings_file=args.settings_file,
            difficulty=args.difficulty
        )

        logger.info("Starting Memory Match Runtime...")
        runtime.start()

    except KeyboardInterrupt:
        print("\n\nShutdown requested by user")
        logger.info("Keyboard interrupt received")
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        print(f"\nERROR: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
