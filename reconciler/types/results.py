# reconciler/types/results.py

"""
Outcome of a single reconciliation pass.

Results are msgspec tagged unions keyed on ``status`` so the HTTP layer
and the CLI can serialise them without knowing which loop produced them.
Amounts stay Python ints until ``to_response`` renders them as decimal
strings.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Union

import msgspec
from msgspec import Struct


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PassResult(Struct, kw_only=True, frozen=True, tag_field="status"):
    timestamp: datetime = msgspec.field(default_factory=utc_now)

    @property
    def status(self) -> str:
        return type(self).__struct_config__.tag

    @property
    def skipped(self) -> bool:
        return False

    def to_response(self) -> Dict[str, Any]:
        data = msgspec.to_builtins(self)
        if 'amount' in data:
            data['amount'] = str(data['amount'])
        return data


# === Reward reconciler ===

class RewardResult(PassResult, kw_only=True, frozen=True):
    claimed_updated: int = 0


class Skipped(RewardResult, tag="skipped", kw_only=True, frozen=True):
    @property
    def skipped(self) -> bool:
        return True


class NoChange(RewardResult, tag="no-change", kw_only=True, frozen=True):
    pass


class NewReward(RewardResult, tag="new-reward", kw_only=True, frozen=True):
    epoch: int
    amount: int
    epoch_count: int = 1


class Initialized(RewardResult, tag="initialized", kw_only=True, frozen=True):
    epoch: int
    amount: int


RewardResultUnion = Union[Skipped, NoChange, NewReward, Initialized]


# === Event log syncer ===

class EventSyncResult(PassResult, kw_only=True, frozen=True):
    pass


class EventsSkipped(EventSyncResult, tag="skipped", kw_only=True, frozen=True):
    @property
    def skipped(self) -> bool:
        return True


class EventsUpToDate(EventSyncResult, tag="no-change", kw_only=True, frozen=True):
    cursor: int


class EventsSynced(EventSyncResult, tag="synced", kw_only=True, frozen=True):
    from_block: int
    to_block: int
    log_count: int
    stored_count: int


EventSyncResultUnion = Union[EventsSkipped, EventsUpToDate, EventsSynced]
