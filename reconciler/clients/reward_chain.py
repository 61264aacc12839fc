# reconciler/clients/reward_chain.py

"""
Read-only bindings for the validator reward contracts.

Only the view functions the reconciler calls are declared in each ABI.
"""

from typing import Optional

from web3 import Web3

from .interfaces import RewardChainReaderInterface
from .web3_rpc import Web3RpcClient
from ..core.errors import ChainReadError
from ..core.logging import LoggingMixin
from ..types import EvmAddress, OperatorContribution, RewardContractsConfig


def _view(name: str, inputs: list, outputs: list) -> dict:
    return {
        "inputs": inputs,
        "name": name,
        "outputs": outputs,
        "stateMutability": "view",
        "type": "function",
    }


def _arg(name: str, type_: str, internal_type: Optional[str] = None, components: Optional[list] = None) -> dict:
    arg = {"internalType": internal_type or type_, "name": name, "type": type_}
    if components is not None:
        arg["components"] = components
    return arg


DISTRIBUTOR_ABI = [
    _view("claimableOperatorRewards",
          [_arg("valAddr", "address")],
          [_arg("amount", "uint256"), _arg("epoch", "uint256")]),
    _view("lastClaimedOperatorRewardsEpoch",
          [_arg("valAddr", "address")],
          [_arg("", "uint256")]),
]

EPOCH_FEEDER_ABI = [
    _view("epoch", [], [_arg("", "uint256")]),
]

CONTRIBUTION_FEED_ABI = [
    _view("available",
          [_arg("epoch", "uint256")],
          [_arg("", "bool")]),
    _view("summary",
          [_arg("epoch", "uint256")],
          [_arg("", "tuple", "struct IValidatorContributionFeed.Summary", [
              _arg("totalWeight", "uint128"),
              _arg("numOfValidators", "uint128"),
          ])]),
    _view("weightOf",
          [_arg("epoch", "uint256"), _arg("valAddr", "address")],
          [_arg("", "tuple", "struct IValidatorContributionFeed.ValidatorWeight", [
              _arg("addr", "address"),
              _arg("weight", "uint96"),
              _arg("collateralRewardShare", "uint128"),
              _arg("delegationRewardShare", "uint128"),
          ]), _arg("", "bool")]),
]

VALIDATOR_MANAGER_ABI = [
    _view("commissionRateAt",
          [_arg("epoch", "uint256"), _arg("valAddr", "address")],
          [_arg("", "uint256")]),
]

EMISSION_ABI = [
    _view("validatorReward",
          [_arg("epoch", "uint256")],
          [_arg("", "uint256")]),
]


class Web3RewardChainReader(RewardChainReaderInterface, LoggingMixin):
    def __init__(self, rpc_client: Web3RpcClient, contracts: RewardContractsConfig):
        self.w3 = rpc_client.w3
        self.contracts_config = contracts
        self.distributor = self._contract(contracts.distributor, DISTRIBUTOR_ABI)
        self.epoch_feeder = self._contract(contracts.epoch_feeder, EPOCH_FEEDER_ABI)
        self.contribution_feed = self._contract(contracts.contribution_feed, CONTRIBUTION_FEED_ABI)
        self.validator_manager = self._contract(contracts.validator_manager, VALIDATOR_MANAGER_ABI)
        self.emission = self._contract(contracts.emission, EMISSION_ABI)

    def _contract(self, address: Optional[EvmAddress], abi: list):
        if not address:
            return None
        return self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)

    @staticmethod
    def _require(contract, name: str):
        if contract is None:
            raise ChainReadError(f"{name} contract address is not configured")
        return contract

    @staticmethod
    def _uint(value, label: str) -> int:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ChainReadError(f"Expected unsigned integer for {label}, got {value!r}")
        return value

    def claimable_operator_rewards(self, operator: EvmAddress) -> int:
        amount, _epoch = self.distributor.functions.claimableOperatorRewards(
            Web3.to_checksum_address(operator)
        ).call()
        return self._uint(amount, "claimableOperatorRewards")

    def last_claimed_operator_rewards_epoch(self, operator: EvmAddress) -> int:
        epoch = self.distributor.functions.lastClaimedOperatorRewardsEpoch(
            Web3.to_checksum_address(operator)
        ).call()
        return self._uint(epoch, "lastClaimedOperatorRewardsEpoch")

    def current_epoch(self) -> int:
        feeder = self._require(self.epoch_feeder, "Epoch feeder")
        return self._uint(feeder.functions.epoch().call(), "epoch")

    def contribution_available(self, epoch: int) -> bool:
        feed = self._require(self.contribution_feed, "Contribution feed")
        return bool(feed.functions.available(epoch).call())

    def total_weight(self, epoch: int) -> int:
        feed = self._require(self.contribution_feed, "Contribution feed")
        total_weight, _num_validators = feed.functions.summary(epoch).call()
        return self._uint(total_weight, "summary.totalWeight")

    def operator_contribution(self, epoch: int, operator: EvmAddress) -> Optional[OperatorContribution]:
        feed = self._require(self.contribution_feed, "Contribution feed")
        weight, exists = feed.functions.weightOf(epoch, Web3.to_checksum_address(operator)).call()
        if not exists:
            return None
        _addr, amount, collateral_share, delegation_share = weight
        return OperatorContribution(
            weight=self._uint(amount, "weightOf.weight"),
            collateral_share=self._uint(collateral_share, "weightOf.collateralRewardShare"),
            delegation_share=self._uint(delegation_share, "weightOf.delegationRewardShare"),
        )

    def validator_emission(self, epoch: int) -> int:
        emission = self._require(self.emission, "Emission")
        return self._uint(emission.functions.validatorReward(epoch).call(), "validatorReward")

    def commission_rate(self, epoch: int, operator: EvmAddress) -> int:
        manager = self._require(self.validator_manager, "Validator manager")
        rate = manager.functions.commissionRateAt(epoch, Web3.to_checksum_address(operator)).call()
        return self._uint(rate, "commissionRateAt")
