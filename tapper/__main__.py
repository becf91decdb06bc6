"""Entry point for Rubber Tapper's Log."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from tapper.app import TapperApp
from tapper.engine.catalog import load_catalog
from tapper.engine.errors import CatalogUnavailableError
from tapper.engine.save import SAVE_DIR, SAVE_FILE, JsonFileStore
from tapper.log import setup_logging

logger = logging.getLogger("tapper")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="tapper", description=__doc__)
    parser.add_argument("--catalog", type=Path, help="JSON catalog to use instead of the bundled one")
    parser.add_argument("--save", type=Path, default=SAVE_FILE, help="save file (default: %(default)s)")
    parser.add_argument("--debug", action="store_true", help="log at DEBUG level")
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.debug else logging.INFO, SAVE_DIR / "tapper.log")

    try:
        catalog = load_catalog(args.catalog)
    except CatalogUnavailableError as exc:
        logger.error("%s", exc)
        print(f"tapper: {exc}", file=sys.stderr)
        return 1

    app = TapperApp(JsonFileStore(args.save), catalog)
    app.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
