"""
Interfaces for the chain data the reconciler reads.

Implementations are injected into the syncer and reconciler so tests can
substitute scripted fakes for a live node.
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from ..types import ChainLog, EvmAddress, EvmHash, OperatorContribution


class RPCClientInterface(ABC):
    """Interface for JSON-RPC node access."""

    @abstractmethod
    def get_latest_block_number(self) -> int:
        """
        Get the latest block number.

        Returns:
            Latest block number
        """
        pass

    @abstractmethod
    def get_logs(self, address: EvmAddress, from_block: int, to_block: int,
                 topics: Optional[List[EvmHash]] = None) -> List[ChainLog]:
        """
        Get every log emitted by ``address`` in ``[from_block, to_block]``.

        Args:
            address: Emitting contract
            from_block: First block, inclusive
            to_block: Last block, inclusive
            topics: Optional topic filter, positional as in eth_getLogs

        Returns:
            Logs in chain order
        """
        pass


class RewardChainReaderInterface(ABC):
    """Interface for the read-only contract calls behind validator rewards."""

    @abstractmethod
    def claimable_operator_rewards(self, operator: EvmAddress) -> int:
        """Total unclaimed operator reward currently owed, in base units."""
        pass

    @abstractmethod
    def last_claimed_operator_rewards_epoch(self, operator: EvmAddress) -> int:
        """Highest epoch already claimed by the operator (0 if none)."""
        pass

    @abstractmethod
    def current_epoch(self) -> int:
        """Epoch currently accruing."""
        pass

    @abstractmethod
    def contribution_available(self, epoch: int) -> bool:
        """Whether contribution data for ``epoch`` is finalized."""
        pass

    @abstractmethod
    def total_weight(self, epoch: int) -> int:
        pass

    @abstractmethod
    def operator_contribution(self, epoch: int, operator: EvmAddress) -> Optional[OperatorContribution]:
        """Operator weight and reward shares for ``epoch``; None when it did not participate."""
        pass

    @abstractmethod
    def validator_emission(self, epoch: int) -> int:
        """Tokens emitted to all validators for ``epoch``."""
        pass

    @abstractmethod
    def commission_rate(self, epoch: int, operator: EvmAddress) -> int:
        """Operator commission for ``epoch`` in basis points of MAX_COMMISSION_RATE."""
        pass
