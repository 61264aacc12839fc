# reconciler/services/reward_calculator.py

"""
Per-epoch operator reward math.

Mirrors the distributor contract's fixed-point arithmetic: all values are
unsigned base units and every division truncates toward zero.

    total_reward    = emission * operator_weight // total_weight
    staker_reward   = total_reward * delegation_share // (collateral_share + delegation_share)
    commission      = staker_reward * commission_rate // max_commission_rate
    operator_reward = (total_reward - staker_reward) + commission

With no collateral or delegation shares the operator keeps the whole
total_reward.
"""

from msgspec import Struct

from ..core.errors import InvariantViolation

MAX_COMMISSION_RATE = 10_000


class EpochRewardInputs(Struct, frozen=True):
    epoch: int
    validator_emission: int
    operator_weight: int
    total_weight: int
    collateral_share: int
    delegation_share: int
    commission_rate: int
    max_commission_rate: int = MAX_COMMISSION_RATE


class EpochRewardBreakdown(Struct, frozen=True):
    epoch: int
    total_reward: int
    staker_reward: int
    commission: int
    operator_reward: int


def _check_inputs(inputs: EpochRewardInputs) -> None:
    for name in ('validator_emission', 'operator_weight', 'total_weight',
                 'collateral_share', 'delegation_share', 'commission_rate'):
        value = getattr(inputs, name)
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvariantViolation(f"{name} must be an integer", epoch=inputs.epoch, value=value)
        if value < 0:
            raise InvariantViolation(f"{name} may not be negative", epoch=inputs.epoch, value=value)

    if inputs.max_commission_rate <= 0:
        raise InvariantViolation("max_commission_rate must be positive",
                                 epoch=inputs.epoch, value=inputs.max_commission_rate)
    if inputs.commission_rate > inputs.max_commission_rate:
        raise InvariantViolation("commission_rate exceeds max_commission_rate",
                                 epoch=inputs.epoch,
                                 commission_rate=inputs.commission_rate,
                                 max_commission_rate=inputs.max_commission_rate)
    if inputs.operator_weight > inputs.total_weight and inputs.total_weight > 0:
        raise InvariantViolation("operator_weight exceeds total_weight",
                                 epoch=inputs.epoch,
                                 operator_weight=inputs.operator_weight,
                                 total_weight=inputs.total_weight)


def compute_operator_reward(inputs: EpochRewardInputs) -> EpochRewardBreakdown:
    _check_inputs(inputs)

    if inputs.total_weight == 0:
        total_reward = 0
    else:
        total_reward = inputs.validator_emission * inputs.operator_weight // inputs.total_weight

    shares = inputs.collateral_share + inputs.delegation_share
    if shares == 0:
        staker_reward = 0
        commission = 0
        operator_reward = total_reward
    else:
        staker_reward = total_reward * inputs.delegation_share // shares
        commission = staker_reward * inputs.commission_rate // inputs.max_commission_rate
        operator_reward = (total_reward - staker_reward) + commission

    if operator_reward < 0:
        raise InvariantViolation("Computed operator reward is negative",
                                 epoch=inputs.epoch, operator_reward=operator_reward)

    return EpochRewardBreakdown(
        epoch=inputs.epoch,
        total_reward=total_reward,
        staker_reward=staker_reward,
        commission=commission,
        operator_reward=operator_reward,
    )
