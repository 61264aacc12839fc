# reconciler/types/evm.py

from typing import Optional

from msgspec import Struct

from .new import EvmAddress, EvmHash, HexStr


class ChainLog(Struct, frozen=True):
    address: EvmAddress
    block_number: int
    transaction_hash: EvmHash
    log_index: int
    data: HexStr
    topics: list[EvmHash]
    block_hash: Optional[EvmHash] = None
    removed: bool = False  # True when dropped by a reorg

    @property
    def natural_key(self) -> tuple[str, int]:
        return (self.transaction_hash, self.log_index)


class OperatorContribution(Struct, frozen=True):
    weight: int
    collateral_share: int
    delegation_share: int
