"""
Gas Calculator
Derives transaction fees from the configured gas price
"""

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_CEILING
from loguru import logger

from blockchain.errors import ConfigError
from blockchain.types import Coin

# Fixed gas estimate for code uploads
UPLOAD_GAS_LIMIT = 3_000_000

# Fee mode that delegates gas estimation to the chain client
AUTO = "auto"

_GAS_PRICE_PATTERN = re.compile(r"^(\d+(?:\.\d+)?|\.\d+)([a-zA-Z][a-zA-Z0-9/:._-]{2,127})$")


@dataclass(frozen=True)
class GasPrice:
    """Price of one gas unit in a given denomination"""

    amount: Decimal
    denom: str

    @classmethod
    def from_string(cls, text: str) -> "GasPrice":
        """
        Parse a gas price such as "0.025uaura"

        Args:
            text: Amount immediately followed by the denomination

        Returns:
            GasPrice instance
        """
        match = _GAS_PRICE_PATTERN.match((text or "").strip())
        if not match:
            raise ConfigError(f"Invalid gas price string: {text!r}")

        try:
            amount = Decimal(match.group(1))
        except InvalidOperation:
            raise ConfigError(f"Invalid gas price amount: {text!r}")

        return cls(amount=amount, denom=match.group(2))

    def __str__(self) -> str:
        return f"{self.amount}{self.denom}"


@dataclass(frozen=True)
class Fee:
    gas_limit: int
    amount: Coin


def calculate_fee(gas_limit: int, gas_price: GasPrice) -> Fee:
    """
    Calculate the fee for a transaction

    Args:
        gas_limit: Gas units the transaction may consume
        gas_price: Price per gas unit

    Returns:
        Fee with the amount rounded up to a whole unit
    """
    if isinstance(gas_limit, bool) or not isinstance(gas_limit, int):
        raise ValueError(f"Gas limit must be an integer, got {gas_limit!r}")
    if gas_limit <= 0:
        raise ValueError(f"Gas limit must be positive, got {gas_limit}")

    total = (gas_price.amount * gas_limit).to_integral_value(rounding=ROUND_CEILING)

    return Fee(gas_limit=gas_limit, amount=Coin(amount=int(total), denom=gas_price.denom))


class GasCalculator:
    """
    Selects fees for each pipeline operation

    Uploads pay a locally computed fee; every other operation uses the
    "auto" mode and lets the client simulate.
    """

    def __init__(self, gas_price: GasPrice):
        """
        Initialize Gas Calculator

        Args:
            gas_price: Configured gas price
        """
        self.gas_price = gas_price

        logger.debug(f"Gas Calculator initialized with gas price {gas_price}")

    def upload_fee(self) -> Fee:
        """Fee for a code upload transaction"""
        fee = calculate_fee(UPLOAD_GAS_LIMIT, self.gas_price)
        logger.debug(f"Upload fee: {fee.amount} for {fee.gas_limit} gas")
        return fee

    @property
    def auto(self) -> str:
        return AUTO
