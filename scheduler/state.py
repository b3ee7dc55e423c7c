"""
Per-call diagnostics tracking.

Every generation call creates its own BuildLog, so nothing is shared
between calls. It records records that were skipped or malformed, mirrors
them to the log stream, and hands them back on the result object.
"""

import logging
from typing import Dict, List, Optional
from collections import defaultdict

from models import Diagnostic

logger = logging.getLogger(__name__)


class BuildLog:
    """
    Collects diagnostics for one child (or one family) during a single call.
    """

    def __init__(self, child_id: Optional[str] = None):
        self.child_id = child_id
        self.diagnostics: List[Diagnostic] = []

    def record_skip(
        self,
        code: str,
        message: str,
        day: Optional[str] = None,
        record_id: Optional[str] = None,
        level: str = "warning",
        child_id: Optional[str] = None
    ) -> Diagnostic:
        """Log a skipped record and keep it for the caller."""
        diagnostic = Diagnostic(
            level=level,
            code=code,
            message=message,
            child_id=child_id or self.child_id,
            day=day,
            record_id=record_id
        )
        self.diagnostics.append(diagnostic)

        log_level = {"error": logging.ERROR, "info": logging.INFO}.get(level, logging.WARNING)
        logger.log(log_level, f"[{diagnostic.child_id or '-'}] {code}: {message}")
        return diagnostic

    def extend(self, diagnostics: List[Diagnostic]) -> None:
        self.diagnostics.extend(diagnostics)

    def get_failure_report(self) -> Dict[str, int]:
        """Counts per diagnostic code, e.g. {'invalid_time': 2}."""
        summary: Dict[str, int] = defaultdict(int)
        for d in self.diagnostics:
            summary[d.code] += 1
        return dict(summary)

    def __len__(self) -> int:
        return len(self.diagnostics)
