from .interfaces import RPCClientInterface, RewardChainReaderInterface
from .web3_rpc import Web3RpcClient
from .reward_chain import Web3RewardChainReader
