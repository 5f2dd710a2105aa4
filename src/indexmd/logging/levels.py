"""
HUMAN logging level -- Readable progress of an indexing run.

Custom level between INFO (20) and WARNING (30).
Does not indicate severity -- it marks the high-level events the user
wants to follow (directory entered, file summarized, index written)
without technical noise.

Hierarchy:
    debug  (10) -> per-call details, sizes, timing
    info   (20) -> System operations (config loaded, adapter ready)
    human  (25) -> * What the indexer does: directory, file, fold, write
    warn   (30) -> Non-fatal problems (skipped files, cycles)
    error  (40) -> Errors
"""

import logging

import structlog

# Custom level: between INFO (20) and WARNING (30)
HUMAN = 25
logging.addLevelName(HUMAN, "HUMAN")


def _human_method(self, message, *args, **kwargs):
    if self.isEnabledFor(HUMAN):
        self._log(HUMAN, message, args, **kwargs)


logging.Logger.human = _human_method

# Register the level in structlog to avoid KeyError: 25
if hasattr(structlog, "stdlib"):
    try:
        structlog.stdlib.LEVEL_TO_NAME[HUMAN] = "human"
    except (AttributeError, KeyError):
        pass
