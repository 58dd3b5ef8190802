"""Exceptions raised by the item recognition engine and its oracle."""

from typing import List


class OracleError(Exception):
    """Base class for oracle call failures."""


class OracleTransportError(OracleError):
    """Network, timeout or rate-limit failure. Safe to retry."""


class OracleResponseError(OracleError):
    """The oracle answered but the payload did not match the response schema."""


class VotingFailedError(Exception):
    """Every voting run failed, so no consensus can be formed."""

    def __init__(self, errors: List[BaseException]):
        self.errors = errors
        detail = "; ".join(str(e) for e in errors[:3])
        super().__init__(f"All {len(errors)} voting runs failed: {detail}")
