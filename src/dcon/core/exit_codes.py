"""Standard exit codes for dcon.

Exit codes follow Unix conventions: 0 success, 1 general, 2 usage.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes for dcon commands."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    USAGE_ERROR = 2
    INPUT_ERROR = 3
    OUTPUT_ERROR = 4
    NETWORK_ERROR = 5
    TIMEOUT = 6
    CONFIG_ERROR = 7
    AUTH_ERROR = 8
    QUERY_ERROR = 9
