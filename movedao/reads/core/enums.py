"""Core enumerations shared across the read layer.

Design Decisions:
    - String enums: values survive JSON snapshots and log records unchanged
    - On-chain codes: ActivityKind owns the u8 code mapping so decoders stay small

Key Types:
    - ActivityKind: Kind of an activity-log record
    - SubjectKind: Whose activity a page is about (dao, user, global)
    - CacheStatus: Age band reported by a cache lookup
    - ErrorClass: Failure taxonomy used by the retry layer
    - PageSource: Which discovery strategy served a page
"""

from enum import Enum


class ActivityKind(str, Enum):
    """Kind of an activity record."""

    DAO_CREATED = "dao_created"
    MEMBER_JOINED = "member_joined"
    MEMBER_LEFT = "member_left"
    PROPOSAL_CREATED = "proposal_created"
    PROPOSAL_VOTED = "proposal_voted"
    PROPOSAL_EXECUTED = "proposal_executed"
    STAKE = "stake"
    UNSTAKE = "unstake"
    TREASURY_DEPOSIT = "treasury_deposit"
    TREASURY_WITHDRAWAL = "treasury_withdrawal"
    REWARD_CLAIMED = "reward_claimed"
    LAUNCHPAD_CREATED = "launchpad_created"
    LAUNCHPAD_INVESTMENT = "launchpad_investment"
    UNKNOWN = "unknown"

    @classmethod
    def from_code(cls, code: int) -> "ActivityKind":
        """Map the contract's u8 activity type to a kind.

        Args:
            code: Raw ``activity_type`` value

        Returns:
            Matching kind, or UNKNOWN for codes the contract added later
        """
        return _CODE_TO_KIND.get(int(code), cls.UNKNOWN)

    @property
    def code(self) -> int | None:
        """On-chain code for this kind (None for UNKNOWN)."""
        return _KIND_TO_CODE.get(self)


_CODE_TO_KIND: dict[int, ActivityKind] = {
    1: ActivityKind.DAO_CREATED,
    2: ActivityKind.MEMBER_JOINED,
    3: ActivityKind.MEMBER_LEFT,
    4: ActivityKind.PROPOSAL_CREATED,
    5: ActivityKind.PROPOSAL_VOTED,
    6: ActivityKind.PROPOSAL_EXECUTED,
    7: ActivityKind.STAKE,
    8: ActivityKind.UNSTAKE,
    9: ActivityKind.TREASURY_DEPOSIT,
    10: ActivityKind.TREASURY_WITHDRAWAL,
    11: ActivityKind.REWARD_CLAIMED,
    12: ActivityKind.LAUNCHPAD_CREATED,
    13: ActivityKind.LAUNCHPAD_INVESTMENT,
}
_KIND_TO_CODE = {kind: code for code, kind in _CODE_TO_KIND.items()}


class SubjectKind(str, Enum):
    """Scope of an activity page."""

    DAO = "dao"
    USER = "user"
    GLOBAL = "global"


class CacheStatus(str, Enum):
    """Age band of a cache lookup."""

    FRESH = "fresh"
    STALE = "stale"
    MISS = "miss"


class ErrorClass(str, Enum):
    """Failure taxonomy for remote reads."""

    RATE_LIMITED = "rate_limited"
    TRANSIENT_NETWORK = "transient_network"
    CROSS_ORIGIN_BLOCKED = "cross_origin_blocked"
    REMOTE_REJECTED = "remote_rejected"
    MALFORMED = "malformed"


class PageSource(str, Enum):
    """Discovery strategy that produced a page."""

    REGISTRY = "registry"
    EVENTS = "events"
    EMPTY = "empty"
