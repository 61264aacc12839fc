# reconciler/clients/web3_rpc.py

from typing import Any, List, Mapping, Optional

from web3 import Web3

from .interfaces import RPCClientInterface
from ..core.errors import ChainReadError
from ..core.logging import LoggingMixin
from ..types import ChainLog, EvmAddress, EvmHash, RpcConfig, to_hex_str


class Web3RpcClient(RPCClientInterface, LoggingMixin):
    """
    A client for reading an EVM chain through a JSON-RPC endpoint.
    """

    def __init__(self, config: RpcConfig, w3: Optional[Web3] = None):
        self.config = config
        self.endpoint_url = config.endpoint_url
        self.w3 = w3 or Web3(Web3.HTTPProvider(
            config.endpoint_url,
            request_kwargs={'timeout': config.timeout},
        ))

    def is_connected(self) -> bool:
        return self.w3.is_connected()

    def get_latest_block_number(self) -> int:
        return int(self.w3.eth.block_number)

    def get_logs(self, address: EvmAddress, from_block: int, to_block: int,
                 topics: Optional[List[EvmHash]] = None) -> List[ChainLog]:
        """
        Fetch logs for a single inclusive block range with eth_getLogs.
        """
        log_filter = {
            'address': Web3.to_checksum_address(address),
            'fromBlock': from_block,
            'toBlock': to_block,
        }
        if topics:
            log_filter['topics'] = list(topics)

        self.log_debug("Requesting logs", contract_address=address,
                       from_block=from_block, to_block=to_block)

        raw_logs = self.w3.eth.get_logs(log_filter)
        return [self.normalize_log(raw) for raw in raw_logs]

    @staticmethod
    def normalize_log(raw: Mapping[str, Any]) -> ChainLog:
        """Convert a web3 log (HexBytes, checksum addresses) into a ChainLog."""
        try:
            block_hash = raw.get('blockHash')
            return ChainLog(
                address=EvmAddress(str(raw['address']).lower()),
                block_number=int(raw['blockNumber']),
                transaction_hash=EvmHash(to_hex_str(raw['transactionHash'])),
                log_index=int(raw['logIndex']),
                data=to_hex_str(raw['data']),
                topics=[EvmHash(to_hex_str(topic)) for topic in raw['topics']],
                block_hash=EvmHash(to_hex_str(block_hash)) if block_hash is not None else None,
                removed=bool(raw.get('removed', False)),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ChainReadError(f"Malformed log from node: {e}") from e
