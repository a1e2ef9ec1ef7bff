"""
Runner module for humphrey.

Processes targets one after another: fetch, parse, extract, build the
result and render it to the output stream.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Sequence, TextIO

from .builder import ResultBuilder
from .config import Config
from .errors import FetchFailure, ParseFailure
from .extraction import RuleExtractor, parse_document
from .fetcher import Fetcher
from .output import Renderer
from .rules import Rule

logger = logging.getLogger(__name__)


@dataclass
class RunStats:
    """Statistics for a run."""
    total: int = 0
    success: int = 0
    skipped: int = 0


def read_targets(stream: TextIO) -> Iterator[str]:
    """Yield one target per non-blank line of a stream."""
    for line in stream:
        target = line.strip()
        if target:
            yield target


class ScrapeRunner:
    """Applies rules to a sequence of targets."""

    def __init__(self, config: Config, rules: Sequence[Rule], fetcher: Fetcher, renderer: Renderer, out: TextIO):
        """
        Initialize ScrapeRunner.

        Args:
            config: Run configuration
            rules: Parsed rules
            fetcher: Fetcher for targets
            renderer: Renderer for results
            out: Stream results are written to

        Raises:
            NameConflict: If rule names need incompatible result shapes
        """
        self.config = config
        self.rules: List[Rule] = list(rules)
        self.fetcher = fetcher
        self.renderer = renderer
        self.out = out
        self.extractor = RuleExtractor()
        self.stats = RunStats()
        # fail on conflicting names before the first fetch
        self._new_builder()

    def _new_builder(self) -> ResultBuilder:
        return ResultBuilder(self.rules, arrays=self.config.arrays, reserved=(self.config.key,))

    def process(self, target: str) -> Dict[str, Any]:
        """
        Download a target and apply every rule to it.

        Args:
            target: URL or local path

        Returns:
            Result mapping with the target stored under the configured key

        Raises:
            FetchFailure: If the target can't be retrieved
            ParseFailure: If the markup can't be parsed
        """
        markup = self.fetcher.fetch(target)
        document = parse_document(markup, target, self.config.parser)

        builder = self._new_builder()
        builder.add_all(self.extractor.extract_all(document, self.rules))

        result = builder.to_dict()
        result[self.config.key] = target
        return result

    def run(self, targets: Iterable[str]) -> RunStats:
        """
        Process targets in order and write one rendering per target.

        In strict mode the first fetch or parse failure is raised. Otherwise
        the target is skipped and the run continues.

        Args:
            targets: URLs or local paths

        Returns:
            Run statistics
        """
        for target in targets:
            self.stats.total += 1
            try:
                result = self.process(target)
            except (FetchFailure, ParseFailure) as e:
                if self.config.strict:
                    raise
                logger.warning(f"Skipping {target}: {e}")
                self.stats.skipped += 1
                continue

            self.out.write(self.renderer.render(result))
            self.out.flush()
            self.stats.success += 1
            logger.debug(f"Successfully processed: {target}")

        logger.info(f"Processed {self.stats.total} targets: {self.stats.success} success, {self.stats.skipped} skipped")
        return self.stats

    def get_stats(self) -> RunStats:
        """Get processing statistics."""
        return self.stats
