"""
bangjump command line.

Usage:
  python -m bangjump "!w albert einstein"          # print destination URL
  python -m bangjump --open "rust borrow !gh"      # ...and open it
  python -m bangjump --suggest g                   # ranked bangs for "!g", with domain and category
"""

import argparse
import sys

from loguru import logger

from bangjump.errors import NavigationFailure
from bangjump.search.catalog import BangCatalog
from bangjump.search.matcher import match
from bangjump.search.resolver import resolve, strip_prefix
from bangjump.services.settings import SettingsService
from bangjump.utils.helpers import open_url


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bangjump",
        description="Resolve a bang query (e.g. '!w albert einstein') to a URL.",
    )
    parser.add_argument("query", nargs="*", help="Query text, may contain a bang")
    parser.add_argument("--settings", help="Path to settings.toml")
    parser.add_argument("--open", action="store_true", help="Open the URL in the browser")
    parser.add_argument("--suggest", metavar="PARTIAL", help="List bangs matching a partial trigger")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if args.verbose else "WARNING")

    settings = SettingsService(args.settings)
    catalog = BangCatalog.build(settings.custom_bangs)

    if args.suggest is not None:
        partial = strip_prefix(args.suggest.strip(), settings.prefix)
        for definition in match(catalog, partial, settings.max_items):
            print("\t".join((
                f"{settings.prefix}{definition.trigger}",
                definition.service_name,
                definition.domain,
                definition.category,
            )))
        return 0

    if not args.query:
        build_parser().print_usage(sys.stderr)
        return 2

    url = resolve(
        " ".join(args.query),
        catalog,
        default_trigger=settings.default_trigger,
        prefix=settings.prefix,
        placeholder=settings.placeholder,
    )
    print(url)

    if args.open and not open_url(url):
        logger.error(str(NavigationFailure(url)))
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
