# logsanitizer/core/domain.py

"""Domain models for sanitizing policies and results."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Dict, Any, Optional, Union


@dataclass(frozen=True)
class Omit:
    """Policy that drops every line containing an address."""


@dataclass(frozen=True)
class Replace:
    """Policy that substitutes every address with a fixed token.

    Attributes:
        token: Replacement text. An empty token blanks the address out
            while keeping the rest of the line.
    """

    token: str


SanitizePolicy = Union[Omit, Replace]


@dataclass
class DetectedAddress:
    """Represents a single address found in the input.

    Attributes:
        entity_type: Address family (IPV4_ADDRESS or IPV6_ADDRESS)
        line_number: 1-based line number in the scanned input
        start: Starting character position within the line
        end: Ending character position within the line
        text: Matched address text
        score: Confidence score reported by the recognizer
        rule_name: Name of the recognizer that detected this address
    """

    entity_type: str
    line_number: int
    start: int
    end: int
    text: str
    score: float
    rule_name: str = "Unknown"


@dataclass
class FileReport:
    """Per-file counters collected while sanitizing a stream."""

    source: Optional[Path] = None
    destination: Optional[Path] = None
    lines_read: int = 0
    lines_written: int = 0
    lines_dropped: int = 0
    lines_changed: int = 0


@dataclass
class SanitizeResult:
    """Result object returned by the text-level sanitize service.

    Attributes:
        original_text: Unmodified input text
        sanitized_text: Text after applying the policy
        entities: Addresses detected in the input
        metadata: Additional processing information
    """

    original_text: str
    sanitized_text: str
    entities: List[DetectedAddress] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
