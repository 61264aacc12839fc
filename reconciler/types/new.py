# reconciler/types/new.py

import re
from typing import NewType, Union

EvmAddress = NewType('EvmAddress', str)
EvmHash = NewType('EvmHash', str)
HexStr = NewType('HexStr', str)

_ADDRESS_RE = re.compile(r'^0x[a-fA-F0-9]{40}$')
_HASH_RE = re.compile(r'^0x[a-fA-F0-9]{64}$')


def is_evm_address(value: str) -> bool:
    return bool(value) and bool(_ADDRESS_RE.match(value))


def is_evm_hash(value: str) -> bool:
    return bool(value) and bool(_HASH_RE.match(value))


def to_evm_address(value: str) -> EvmAddress:
    if not is_evm_address(value):
        raise ValueError(f"Invalid EVM address: {value!r}")
    return EvmAddress(value.lower())


def to_evm_hash(value: str) -> EvmHash:
    if not is_evm_hash(value):
        raise ValueError(f"Invalid EVM hash: {value!r}")
    return EvmHash(value.lower())


def to_hex_str(value: Union[bytes, str]) -> HexStr:
    """Render raw bytes or a hex string as a lower-case 0x-prefixed string."""
    if isinstance(value, (bytes, bytearray)):
        return HexStr('0x' + bytes(value).hex())
    if not value.startswith('0x'):
        value = '0x' + value
    return HexStr(value.lower())
