"""Main entry point for the storyboard CLI."""
from __future__ import annotations

import logging
import sys

from engine.storyboard.assembly import FileStorage, StoryboardAssembly
from engine.storyboard.config import RunOptions, Settings, settings
from engine.storyboard.scanner import scan_components
from storyboard_cli import __version__

logger = logging.getLogger("storyboard_cli")


def print_help():
    """Print help message."""
    print(f"""
Storyboard CLI v{__version__}

Usage:
  storyboard [options]

Options:
  --include-utils    Include utility files in the storyboard
  --include-index    Include index files in the storyboard
  --verbose          Show more detailed output
  --no-preserve      Don't preserve existing scene configurations (create fresh storyboard)
  --no-prune         Keep scenes for components that no longer exist
  --no-force-regen   Don't regenerate missing scenes for existing components
                     (skipped components get no scene and no import)
  --help             Show this help message

Environment:
  STORYBOARD_ROOT           Project root (default: current directory)
  STORYBOARD_SRC_DIR        Source directory to scan (default: src)
  STORYBOARD_PATH           Storyboard file (default: utopia/storyboard.js)
  STORYBOARD_STATE_PATH     Layout state file, empty to disable
                            (default: utopia/.storyboard-state.json)
  STORYBOARD_FORCE_INCLUDE  Comma-separated names always scanned
  STORYBOARD_LOG_LEVEL      Override log level (DEBUG, INFO, WARNING)
""")


def parse_args(args: list[str], force_include: tuple[str, ...] = ()) -> RunOptions:
    """
    Parse command line arguments into frozen run options.

    No flag takes a value. Anything unrecognized is ignored.
    """
    flags = set(args)
    return RunOptions(
        include_utils="--include-utils" in flags,
        include_index="--include-index" in flags,
        verbose="--verbose" in flags,
        preserve_existing="--no-preserve" not in flags,
        prune="--no-prune" not in flags,
        force_regen="--no-force-regen" not in flags,
        show_help="--help" in flags,
        force_include=force_include,
    )


def setup_logging(options: RunOptions, config: Settings = settings) -> None:
    level = config.LOG_LEVEL
    if level is None:
        level = logging.DEBUG if options.verbose else logging.INFO
    logging.basicConfig(level=level, format="%(message)s")


def describe_options(options: RunOptions) -> None:
    if options.include_utils:
        logger.info("Including utility files")
    if options.include_index:
        logger.info("Including index files")
    if options.verbose:
        logger.info("Verbose mode enabled")
    if not options.prune:
        logger.info("Disabling pruning of removed components")
    if not options.force_regen:
        logger.info("Not regenerating missing scenes for existing components")


def run(options: RunOptions, config: Settings = settings) -> bool:
    """
    One storyboard update. Returns False if it failed.

    Failures are logged, never raised: a broken run leaves the previous
    storyboard in place.
    """
    try:
        logger.info("Scanning for React components...")
        components = scan_components(config.SRC_DIR, options.scan_config())

        print(f"Found {len(components)} components:")
        for c in components:
            style = "accepts style" if c.has_style_prop else "no style prop"
            print(f"- {c.name} ({c.path}) {style}")
            if options.verbose:
                print(f"  Full path: {c.full_path}")

        storage = FileStorage(config.STORYBOARD_PATH, config.STATE_PATH, src_dir=config.SRC_DIR)
        assembly = StoryboardAssembly(storage, options)
        update = assembly.update(components)
        assembly.save(update)

        logger.info("Storyboard updated successfully!")
        return True
    except Exception:
        logger.exception("Error updating storyboard")
        return False


def main(argv: list[str] | None = None):
    """Main entry point."""
    options = parse_args(sys.argv[1:] if argv is None else argv, settings.FORCE_INCLUDE)

    if options.show_help:
        print_help()
        return

    setup_logging(options)
    describe_options(options)
    run(options)


if __name__ == "__main__":
    main()
