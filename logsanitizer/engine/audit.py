# logsanitizer/engine/audit.py

"""Presidio-based address auditor for dry-run reports."""

import logging
from typing import Iterable, List, Optional

from presidio_analyzer import EntityRecognizer

from logsanitizer.core.definitions import EntityType
from logsanitizer.core.domain import DetectedAddress
from logsanitizer.core.exceptions import InitializationError
from logsanitizer.core.loader import PatternLoader
from logsanitizer.engine.recognizers import create_all_recognizers

logger = logging.getLogger(__name__)


class AddressAuditor:
    """Reports every address found in the input without modifying it.

    Runs the IPv4 and IPv6 Presidio recognizers directly; no NLP engine is
    involved since both grammars are plain patterns.
    """

    def __init__(self, loader: Optional[PatternLoader] = None) -> None:
        """Initialize the auditor.

        Args:
            loader: Pattern source, defaults to the packaged patterns.yaml

        Raises:
            InitializationError: If the recognizers cannot be built.
        """
        try:
            self._recognizers: List[EntityRecognizer] = create_all_recognizers(
                loader
            )
        except Exception as e:
            logger.error("Auditor initialization failed", exc_info=True)
            raise InitializationError("Failed to initialize address recognizers") from e

    def audit_line(self, line: str, line_number: int = 1) -> List[DetectedAddress]:
        """Detects addresses in a single line.

        Args:
            line: Line content
            line_number: 1-based position of the line in its input

        Returns:
            Detected addresses sorted by start offset. A hit lying inside a
            wider hit (the dotted quad of an IPv4-mapped IPv6 address) is
            reported once, as the wider address.
        """
        results = []
        for recognizer in self._recognizers:
            results.extend(
                recognizer.analyze(
                    text=line,
                    entities=list(EntityType.ALL),
                    nlp_artifacts=None,
                )
            )

        detected = [
            DetectedAddress(
                entity_type=r.entity_type,
                line_number=line_number,
                start=r.start,
                end=r.end,
                text=line[r.start : r.end],
                score=r.score,
                rule_name=(
                    r.analysis_explanation.recognizer
                    if r.analysis_explanation
                    else "Unknown"
                ),
            )
            for r in results
        ]
        detected.sort(key=lambda d: (d.start, -d.end))

        outermost: List[DetectedAddress] = []
        for address in detected:
            if outermost and address.end <= outermost[-1].end:
                continue
            outermost.append(address)
        return outermost

    def audit_lines(self, lines: Iterable[str]) -> List[DetectedAddress]:
        """Detects addresses across an iterable of lines."""
        detected: List[DetectedAddress] = []
        for number, line in enumerate(lines, start=1):
            detected.extend(self.audit_line(line, number))

        logger.info(
            "Audit completed",
            extra={
                "address_count": len(detected),
                "entity_types": sorted({d.entity_type for d in detected}),
            },
        )
        return detected
