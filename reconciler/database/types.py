# reconciler/database/types.py

from decimal import Decimal
from typing import Optional, Union

from sqlalchemy import String
from sqlalchemy.dialects.postgresql import NUMERIC
from sqlalchemy.types import TypeDecorator

from ..types.new import EvmAddress, EvmHash


class EvmAddressType(TypeDecorator):
    impl = String(42)
    cache_ok = True

    def process_bind_param(self, value: Optional[str], dialect) -> Optional[str]:
        return str(value).lower() if value else None

    def process_result_value(self, value: Optional[str], dialect) -> Optional[EvmAddress]:
        return EvmAddress(value) if value else None


class EvmHashType(TypeDecorator):
    impl = String(66)
    cache_ok = True

    def process_bind_param(self, value: Optional[str], dialect) -> Optional[str]:
        return str(value).lower() if value else None

    def process_result_value(self, value: Optional[str], dialect) -> Optional[EvmHash]:
        return EvmHash(value) if value else None


class TokenAmountType(TypeDecorator):
    """
    Unsigned token amount in base units.

    NUMERIC(78, 0) on PostgreSQL (fits any uint256), a decimal string on
    other dialects. Always an ``int`` on the Python side.
    """

    impl = NUMERIC(precision=78, scale=0)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            return dialect.type_descriptor(NUMERIC(precision=78, scale=0))
        return dialect.type_descriptor(String(78))

    def process_bind_param(self, value: Optional[Union[int, Decimal]], dialect):
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, (int, Decimal)):
            raise TypeError(f"Token amounts must be integers, got {type(value).__name__}")
        if isinstance(value, Decimal) and value != value.to_integral_value():
            raise ValueError(f"Token amounts must be whole base units, got {value}")
        value = int(value)
        if value < 0:
            raise ValueError(f"Token amounts must be non-negative, got {value}")
        if dialect.name == 'postgresql':
            return Decimal(value)
        return str(value)

    def process_result_value(self, value, dialect) -> Optional[int]:
        if value is None:
            return None
        return int(value)
