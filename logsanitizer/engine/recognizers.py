# logsanitizer/engine/recognizers.py

"""Address recognizers: the precompiled matcher and its Presidio twins."""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple, Pattern as RegexPattern
from presidio_analyzer import Pattern, PatternRecognizer, EntityRecognizer

from logsanitizer.core.definitions import EntityType
from logsanitizer.core.exceptions import InitializationError
from logsanitizer.core.loader import PatternLoader

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AddressPattern:
    """Immutable, precompiled recognizer for one address family."""

    entity_type: str
    names: Tuple[str, ...]
    regexes: Tuple[RegexPattern, ...]

    @classmethod
    def compile(cls, entity_type: str, loader: PatternLoader) -> "AddressPattern":
        """Compiles every pattern definition registered for a family.

        Raises:
            InitializationError: If a definition is not a valid regex.
        """
        definitions = loader.get_patterns(entity_type)
        if not definitions:
            raise InitializationError(f"No patterns defined for {entity_type}")

        try:
            regexes = tuple(re.compile(p["regex"]) for p in definitions)
        except re.error as e:
            logger.error(f"Failed to compile {entity_type} pattern: {e}")
            raise InitializationError(
                f"Invalid regular expression for {entity_type}"
            ) from e

        return cls(
            entity_type=entity_type,
            names=tuple(p["name"] for p in definitions),
            regexes=regexes,
        )

    def search(self, line: str) -> bool:
        return any(regex.search(line) for regex in self.regexes)

    def sub(self, line: str, token: str) -> str:
        # Callable replacement keeps backslashes in the token literal
        for regex in self.regexes:
            line = regex.sub(lambda _: token, line)
        return line


class AddressMatcher:
    """Stateless matcher for IPv4 and IPv6 addresses embedded in text.

    Holds the two precompiled address patterns. Every call is independent
    of the previous ones, so one instance can be shared by any number of
    callers.
    """

    def __init__(self, ipv4: AddressPattern, ipv6: AddressPattern) -> None:
        self.ipv4 = ipv4
        self.ipv6 = ipv6

    @classmethod
    def from_loader(cls, loader: Optional[PatternLoader] = None) -> "AddressMatcher":
        """Builds the matcher from the loaded grammars.

        Args:
            loader: Pattern source, defaults to the packaged patterns.yaml

        Raises:
            InitializationError: If either grammar cannot be compiled.
        """
        loader = loader or PatternLoader.get_instance()
        matcher = cls(
            ipv4=AddressPattern.compile(EntityType.IPV4, loader),
            ipv6=AddressPattern.compile(EntityType.IPV6, loader),
        )
        logger.debug("AddressMatcher compiled", extra={"matcher": repr(matcher)})
        return matcher

    def matches_ipv4(self, line: str) -> bool:
        return self.ipv4.search(line)

    def matches_ipv6(self, line: str) -> bool:
        return self.ipv6.search(line)

    def replace_ipv4(self, line: str, token: str) -> str:
        return self.ipv4.sub(line, token)

    def replace_ipv6(self, line: str, token: str) -> str:
        return self.ipv6.sub(line, token)

    def __repr__(self):
        return (
            f"<AddressMatcher "
            f"ipv4={list(self.ipv4.names)} "
            f"ipv6={list(self.ipv6.names)}>"
        )


def _get_patterns(entity_type: str, loader: PatternLoader) -> List[Pattern]:
    """Converts loader definitions into Presidio Pattern objects."""
    return [
        Pattern(name=p["name"], regex=p["regex"], score=p["score"])
        for p in loader.get_patterns(entity_type)
    ]


class AddressRecognizer(PatternRecognizer):
    """Presidio pattern recognizer for one address family.

    Uses case-sensitive matching, the same as AddressMatcher, so the
    audit reports exactly what a sanitize run would touch.
    """

    def __init__(self, entity_type: str, loader: Optional[PatternLoader] = None):
        loader = loader or PatternLoader.get_instance()
        super().__init__(
            supported_entity=entity_type,
            name=f"{entity_type}_Recognizer",
            patterns=_get_patterns(entity_type, loader),
            global_regex_flags=re.MULTILINE,
        )


class IPv4Recognizer(AddressRecognizer):
    """Dotted-quad recognizer."""

    def __init__(self, loader: Optional[PatternLoader] = None):
        super().__init__(EntityType.IPV4, loader)


class IPv6Recognizer(AddressRecognizer):
    """Colon-hex recognizer, including zone and IPv4-mapped forms."""

    def __init__(self, loader: Optional[PatternLoader] = None):
        super().__init__(EntityType.IPV6, loader)


def create_all_recognizers(
    loader: Optional[PatternLoader] = None,
) -> List[EntityRecognizer]:
    """Create the recognizer set used by the auditor, IPv4 first."""
    recognizers: List[EntityRecognizer] = [
        IPv4Recognizer(loader),
        IPv6Recognizer(loader),
    ]
    logger.info(f"Initialized {len(recognizers)} address recognizers")
    return recognizers
