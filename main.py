#!/usr/bin/env python3
"""
midi-catalog: build museplay.json from a folder of MIDI files.

Files named <difficulty>-<title>-<artist>.mid are moved from new/ into
midi/, parsed, deduplicated and listed newest first in museplay.json.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from utils.logging_config import setup_logging
from utils.config_loader import get_config_template, load_config
from utils.exceptions import MusicCatalogError, NoAcceptedFilesError
from utils.prompt import always_yes, confirm
from pipeline.orchestrator import CatalogPipeline
from pipeline.report import format_summary


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Scan a MIDI library and write a JSON catalog",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                        # Use the current directory (new/, midi/, museplay.json)
  %(prog)s /path/to/library       # Use another base directory
  %(prog)s --yes                  # Overwrite an existing catalog without asking (backup kept)
  %(prog)s --print-config         # Print a config.yaml template
        """
    )

    parser.add_argument(
        "base_dir",
        type=Path,
        nargs="?",
        default=Path.cwd(),
        help="Directory holding new/, midi/ and the catalog (default: current directory)"
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config file (default: <base_dir>/config.yaml)"
    )

    parser.add_argument(
        "--yes", "-y",
        action="store_true",
        help="Overwrite an existing catalog without prompting"
    )

    parser.add_argument(
        "--no-move",
        action="store_true",
        help="Do not move files from new/ into midi/"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    parser.add_argument(
        "--print-config",
        action="store_true",
        help="Print a configuration template and exit"
    )

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    try:
        args = parse_arguments(argv)

        if args.print_config:
            print(get_config_template(), end="")
            return 0

        base_dir = args.base_dir.resolve()
        config_path = args.config or base_dir / "config.yaml"
        config = load_config(config_path)

        log_level = "DEBUG" if args.verbose else config['logging']['level']
        logger = setup_logging(
            log_level,
            base_dir / config['paths']['log_file'],
            max_file_size=config['logging']['max_file_size'],
            backup_count=config['logging']['backup_count']
        )
        logger.info("Starting midi-catalog")

        pipeline = CatalogPipeline(
            config=config,
            base_dir=base_dir,
            confirm=always_yes if args.yes else confirm,
            move_new=not args.no_move
        )

        try:
            result = pipeline.run()
        except NoAcceptedFilesError as e:
            if e.result is not None:
                for line in format_summary(e.result):
                    logger.info(line)
            logger.error(str(e))
            return 1

        for line in format_summary(result):
            logger.info(line)

        logger.info("All done")
        return 0

    except KeyboardInterrupt:
        print("\nOperation cancelled by user.")
        return 1
    except MusicCatalogError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
