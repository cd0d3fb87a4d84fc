"""Street-turn matching: reuse a released import empty for a pending export booking."""

from datetime import date
from typing import Iterable, List, Sequence

from src.config.logging_config import get_logger
from src.models.records import ExportCandidate, ImportCandidate, StreetTurnCandidate
from src.models.schema import CustomsStatus, MatchType, StreetTurnRules

logger = get_logger(__name__)


def _terminal_key(terminal: str) -> str:
    return terminal.strip().casefold()


class StreetTurnMatcher:
    """Pairs import containers with export bookings.

    Every compatible pair is returned; one import can appear in several
    candidates. Choosing which pairing to execute is the dispatcher's job.
    The matcher keeps no state between calls.
    """

    def __init__(self, rules: StreetTurnRules):
        self.rules = rules

    def is_eligible(self, imp: ImportCandidate) -> bool:
        """Only containers released by customs can be street-turned."""
        return imp.customs_status is CustomsStatus.RELEASED

    def is_compatible(self, imp: ImportCandidate, exp: ExportCandidate) -> bool:
        if imp.size != exp.size:
            return False
        if self.rules.require_type_match and imp.container_type != exp.container_type:
            return False
        return True

    def match_type(self, imp: ImportCandidate, exp: ExportCandidate) -> MatchType:
        if _terminal_key(imp.terminal) == _terminal_key(exp.terminal):
            return MatchType.SAME_TERMINAL
        return MatchType.DIFFERENT_TERMINAL

    def find_matches(
        self,
        imports: Iterable[ImportCandidate],
        exports: Sequence[ExportCandidate],
    ) -> List[StreetTurnCandidate]:
        """All (import, export) pairs that qualify for a street turn.

        Args:
            imports: Import containers on hand
            exports: Export bookings needing equipment

        Returns:
            Candidates in no particular order; see ``sort_by_urgency``
        """
        exports = list(exports)
        candidates = []
        for imp in imports:
            if not self.is_eligible(imp):
                continue
            for exp in exports:
                if not self.is_compatible(imp, exp):
                    continue
                match_type = self.match_type(imp, exp)
                savings = (
                    self.rules.same_terminal_savings
                    if match_type is MatchType.SAME_TERMINAL
                    else self.rules.different_terminal_savings
                )
                candidates.append(StreetTurnCandidate(
                    import_reference=imp.reference,
                    import_container=imp.container_number,
                    import_terminal=imp.terminal,
                    import_last_free_day=imp.last_free_day,
                    export_reference=exp.reference,
                    export_terminal=exp.terminal,
                    export_cutoff=exp.port_cutoff,
                    container_size=imp.size,
                    match_type=match_type,
                    estimated_savings=savings,
                ))

        logger.info(f"Found {len(candidates)} street-turn candidate(s)")
        return candidates


def sort_by_urgency(candidates: Iterable[StreetTurnCandidate]) -> List[StreetTurnCandidate]:
    """Order candidates by import last free day, earliest first; unknown LFDs go last."""
    return sorted(
        candidates,
        key=lambda c: (c.import_last_free_day is None, c.import_last_free_day or date.max),
    )
