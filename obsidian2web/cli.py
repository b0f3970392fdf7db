"""Command line entry point."""

import argparse
import logging
import sys
from typing import List, Optional

from obsidian2web.core.config import load_config
from obsidian2web.core.context import BuildContext
from obsidian2web.core.models import BuildError
from obsidian2web.core.pipeline import Pipeline

logger = logging.getLogger("obsidian2web")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="obsidian2web",
        description="Build a static website out of an Obsidian vault.",
    )
    parser.add_argument("build_file", help="path to the YAML build file")
    parser.add_argument("-v", "--verbose", action="store_true", help="log every processor run")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.build_file)
        result = Pipeline(BuildContext(config)).build()
    except (BuildError, OSError) as e:
        logger.error("build failed: %s", e)
        return 1

    logger.info("built %d pages into %s", len(result.pages), result.output_dir)
    return 0


if __name__ == "__main__":
    sys.exit(main())
