# logsanitizer/core/definitions.py

"""Entity type constants for network address detection."""


class EntityType:
    """Constants representing detectable address families."""

    IPV4 = "IPV4_ADDRESS"
    IPV6 = "IPV6_ADDRESS"

    # Evaluation order for replacement
    ALL = (IPV4, IPV6)
