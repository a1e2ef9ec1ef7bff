"""
CLI module for humphrey.

Provides command-line interface and orchestration logic.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from .config import Config, load_config, merge_config
from .errors import HumphreyError
from .fetcher import create_fetcher
from .output import create_renderer
from .rules import parse_rules
from .runner import RunStats, ScrapeRunner, read_targets

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """
    Set up logging configuration.

    Diagnostics are single "humphrey: message" lines unless verbose, which
    adds timestamps and logger names.
    """
    if verbose:
        level = logging.DEBUG
        log_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    else:
        level = logging.WARNING
        log_format = 'humphrey: %(message)s'
    logging.basicConfig(
        level=level,
        format=log_format,
        datefmt='%Y-%m-%d %H:%M:%S',
        stream=sys.stderr,
        force=True
    )


def _one_line(error: Exception) -> str:
    return " ".join(str(error).split())


def run_scraper(config: Config, stdin: TextIO, stdout: TextIO) -> RunStats:
    """
    Main scraping orchestration function.

    Args:
        config: Run configuration, rules included
        stdin: Stream of targets, read when no page is configured
        stdout: Stream results are written to

    Returns:
        Run statistics

    Raises:
        HumphreyError: On malformed rules, conflicting names, template
            errors and, in strict mode, fetch or parse failures
    """
    rules = parse_rules(config.rules)
    renderer = create_renderer(config)

    targets = [config.page] if config.page else read_targets(stdin)
    with create_fetcher(config) as fetcher:
        runner = ScrapeRunner(config, rules, fetcher, renderer, stdout)
        return runner.run(targets)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="humphrey",
        description="Extract data from web pages with CSS selector rules",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
rules:
  name/selector[/attribute]
  dotted names nest: "link.href/a/href" "link.text/a" give a list of
  {"href": ..., "text": ...} records under "link"

Examples:
  humphrey --page https://example.com "title/h1"
  humphrey --pretty --page https://example.com "link.href/a/href" "link.text/a"
  cat urls.txt | humphrey --no-strict --tmpl "{{ key }}: {{ title }}\\n" "title/h1"
        """
    )
    parser.add_argument('rules', nargs='*', metavar='rule',
                        help='Extraction rule: name/selector[/attribute]')
    parser.add_argument('--key', default=None,
                        help='Output field name for the page URL (default: key)')
    parser.add_argument('--page', default=None,
                        help='URL or file to scrape; read one per line from stdin when omitted')
    parser.add_argument('--tmpl', default=None,
                        help='Jinja2 template for output instead of JSON')
    parser.add_argument('--tmpl-file', default=None,
                        help='Read the output template from a file')
    parser.add_argument('--pretty', action='store_true', default=None,
                        help='Indent JSON output')
    parser.add_argument('--strict', action=argparse.BooleanOptionalAction, default=None,
                        help='Abort on the first page that fails (default: on)')
    parser.add_argument('--lenient', dest='strict', action='store_false', default=None,
                        help='Skip pages that fail, same as --no-strict')
    parser.add_argument('--arrays', action='store_true', default=None,
                        help='Always output lists, even for zero or one match')
    parser.add_argument('--raw', action='store_true', default=None,
                        help='Print only the matched values, one per line')
    parser.add_argument('--escape-html', action='store_true', default=None,
                        help='Escape <, > and & in JSON output')
    parser.add_argument('--browser', action='store_true', default=None,
                        help='Render pages in a headless browser (Crawl4AI)')
    parser.add_argument('--user-agent', default=None,
                        help='User-Agent header for requests')
    parser.add_argument('--timeout', type=float, default=None,
                        help='Request timeout in seconds')
    parser.add_argument('--parser', default=None,
                        help='BeautifulSoup parser (default: lxml)')
    parser.add_argument('--config', default=None,
                        help='JSON configuration file')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Enable verbose logging')
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    try:
        config = load_config(args.config) if args.config else Config()
        overrides = {
            "key": args.key,
            "page": args.page,
            "tmpl": args.tmpl,
            "pretty": args.pretty,
            "strict": args.strict,
            "arrays": args.arrays,
            "raw": args.raw,
            "escape_html": args.escape_html,
            "browser": args.browser,
            "user_agent": args.user_agent,
            "timeout": args.timeout,
            "parser": args.parser,
        }
        if args.tmpl_file:
            overrides["tmpl"] = Path(args.tmpl_file).read_text(encoding="utf-8")
        config = merge_config(config, overrides, args.rules)
    except (OSError, ValueError) as e:
        logger.error(f"Invalid configuration: {_one_line(e)}")
        sys.exit(1)

    if not config.rules:
        parser.print_usage(sys.stderr)
        parser.exit(2, f"{parser.prog}: error: at least one rule is required\n")

    try:
        run_scraper(config, sys.stdin, sys.stdout)
    except HumphreyError as e:
        logger.error(_one_line(e))
        sys.exit(1)


if __name__ == '__main__':
    main()
