# logsanitizer/engine/sanitizer.py

"""Line sanitizer applying an omit or replace policy to single lines."""

import logging
from typing import Iterable, Iterator, Optional

from logsanitizer.core.domain import Omit, Replace, SanitizePolicy
from logsanitizer.core.exceptions import ValidationError
from logsanitizer.engine.recognizers import AddressMatcher

logger = logging.getLogger(__name__)


class LineSanitizer:
    """Applies a SanitizePolicy to one line at a time.

    Performs no I/O. The matcher is injected so a single precompiled
    instance is shared by every sanitizer in the process.
    """

    def __init__(self, matcher: AddressMatcher) -> None:
        self.matcher = matcher

    def contains_address(self, line: str) -> bool:
        """Checks both address families against the line."""
        has_ipv4 = self.matcher.matches_ipv4(line)
        has_ipv6 = self.matcher.matches_ipv6(line)
        return has_ipv4 or has_ipv6

    def sanitize(self, line: str, policy: SanitizePolicy) -> Optional[str]:
        """Sanitizes a single line.

        Args:
            line: Line content without its trailing newline
            policy: Omit or Replace

        Returns:
            The line to emit, or None when the line must be suppressed.
        """
        if isinstance(policy, Replace):
            # IPv4 first: IPv6 grammar embeds dotted quads
            line = self.matcher.replace_ipv4(line, policy.token)
            return self.matcher.replace_ipv6(line, policy.token)

        if isinstance(policy, Omit):
            if self.contains_address(line):
                return None
            return line

        raise ValidationError(f"Unsupported sanitize policy: {policy!r}")

    def sanitize_lines(
        self, lines: Iterable[str], policy: SanitizePolicy
    ) -> Iterator[str]:
        """Yields sanitized lines in input order, skipping suppressed ones."""
        for line in lines:
            result = self.sanitize(line, policy)
            if result is not None:
                yield result


def policy_from_replacement(
    replacement: Optional[str], matcher: Optional[AddressMatcher] = None
) -> SanitizePolicy:
    """Maps an optional replacement token to a policy.

    None selects Omit; any string, including the empty one, selects Replace.
    When a matcher is given, a token that itself looks like an address is
    reported since repeated runs would then keep rewriting it.
    """
    if replacement is None:
        return Omit()

    if matcher is not None and LineSanitizer(matcher).contains_address(replacement):
        logger.warning(
            "Replacement token contains an address; output is not idempotent",
            extra={"token": replacement},
        )

    return Replace(token=replacement)
