"""Tests for web3 log normalisation."""

import pytest
from unittest.mock import Mock
from web3 import Web3

from reconciler.clients.web3_rpc import Web3RpcClient
from reconciler.core.errors import ChainReadError
from reconciler.types import RpcConfig

TX_HASH = bytes.fromhex("aa" * 32)
TOPIC = bytes.fromhex("0f" * 32)


def _raw_log(**overrides):
    raw = {
        'address': "0xAbCdEf0123456789aBcDeF0123456789ABCDEF01",
        'blockNumber': 120,
        'transactionHash': TX_HASH,
        'logIndex': 4,
        'data': b"\x00\x01",
        'topics': [TOPIC],
        'blockHash': bytes.fromhex("bb" * 32),
    }
    raw.update(overrides)
    return raw


class TestNormalizeLog:

    def test_bytes_fields_become_lowercase_hex(self):
        log = Web3RpcClient.normalize_log(_raw_log())

        assert log.address == "0xabcdef0123456789abcdef0123456789abcdef01"
        assert log.transaction_hash == "0x" + "aa" * 32
        assert log.data == "0x0001"
        assert log.topics == ["0x" + "0f" * 32]
        assert log.block_hash == "0x" + "bb" * 32
        assert log.natural_key == ("0x" + "aa" * 32, 4)
        assert log.removed is False

    def test_hex_string_fields_are_accepted(self):
        log = Web3RpcClient.normalize_log(_raw_log(transactionHash="0x" + "AA" * 32, data="0x"))

        assert log.transaction_hash == "0x" + "aa" * 32
        assert log.data == "0x"

    def test_missing_field_raises_chain_read_error(self):
        raw = _raw_log()
        del raw['logIndex']

        with pytest.raises(ChainReadError):
            Web3RpcClient.normalize_log(raw)


class TestGetLogs:

    def test_single_range_request(self):
        w3 = Mock()
        w3.eth.get_logs.return_value = [_raw_log()]
        client = Web3RpcClient(RpcConfig(endpoint_url="http://localhost:8545"), w3=w3)

        logs = client.get_logs("0xabcdef0123456789abcdef0123456789abcdef01", 100, 200,
                               topics=["0x" + "0f" * 32])

        assert len(logs) == 1
        log_filter = w3.eth.get_logs.call_args[0][0]
        assert log_filter['fromBlock'] == 100
        assert log_filter['toBlock'] == 200
        assert log_filter['address'] == Web3.to_checksum_address("0xabcdef0123456789abcdef0123456789abcdef01")
        assert log_filter['topics'] == ["0x" + "0f" * 32]

    def test_latest_block_number(self):
        w3 = Mock()
        w3.eth.block_number = 12345
        client = Web3RpcClient(RpcConfig(endpoint_url="http://localhost:8545"), w3=w3)

        assert client.get_latest_block_number() == 12345


class TestRewardChainReader:

    @staticmethod
    def _reader(**addresses):
        from reconciler.clients.reward_chain import Web3RewardChainReader
        from reconciler.types import RewardContractsConfig

        rpc_client = Mock()
        contracts = RewardContractsConfig(distributor="0x" + "3" * 40, **addresses)
        return Web3RewardChainReader(rpc_client, contracts), rpc_client.w3

    def test_epoch_contracts_required_for_epoch_calls(self):
        reader, _ = self._reader()

        with pytest.raises(ChainReadError):
            reader.current_epoch()

    def test_missing_contribution_is_none(self):
        reader, w3 = self._reader(contribution_feed="0x" + "4" * 40)
        contract = w3.eth.contract.return_value
        contract.functions.weightOf.return_value.call.return_value = (
            ("0x" + "0" * 40, 0, 0, 0), False)

        assert reader.operator_contribution(3, "0x" + "2" * 40) is None

    def test_contribution_tuple_is_unpacked(self):
        reader, w3 = self._reader(contribution_feed="0x" + "4" * 40)
        contract = w3.eth.contract.return_value
        contract.functions.weightOf.return_value.call.return_value = (
            ("0x" + "2" * 40, 30, 20, 80), True)

        contribution = reader.operator_contribution(3, "0x" + "2" * 40)

        assert (contribution.weight, contribution.collateral_share, contribution.delegation_share) == (30, 20, 80)

    def test_negative_uint_is_rejected(self):
        reader, w3 = self._reader()
        w3.eth.contract.return_value.functions.claimableOperatorRewards.return_value.call.return_value = (-1, 0)

        with pytest.raises(ChainReadError):
            reader.claimable_operator_rewards("0x" + "2" * 40)
