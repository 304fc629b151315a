"""
Unit Tests for fee calculation
"""

from decimal import Decimal

import pytest

from blockchain.errors import ConfigError
from blockchain.types import Coin
from utils.gas_calculator import AUTO, UPLOAD_GAS_LIMIT, GasCalculator, GasPrice, calculate_fee


class TestGasPrice:

    @pytest.mark.parametrize("text, amount, denom", [
        ("0.025uaura", Decimal("0.025"), "uaura"),
        ("1ueaura", Decimal("1"), "ueaura"),
        (".5ustake", Decimal(".5"), "ustake"),
        ("0.001ibc/27394FB092D2ECCD56123C74F36E4C1F926001CEADA9CA97EA622B25F41E5EB2",
         Decimal("0.001"), "ibc/27394FB092D2ECCD56123C74F36E4C1F926001CEADA9CA97EA622B25F41E5EB2"),
    ])
    def test_parse(self, text, amount, denom):
        price = GasPrice.from_string(text)

        assert price.amount == amount
        assert price.denom == denom

    @pytest.mark.parametrize("text", ["", "uaura", "0.025", "0.025 uaura", "-1uaura", "1ua"])
    def test_invalid(self, text):
        with pytest.raises(ConfigError):
            GasPrice.from_string(text)

    def test_str_round_trips(self):
        assert str(GasPrice.from_string("0.025uaura")) == "0.025uaura"


class TestCalculateFee:

    def test_upload_fee(self):
        fee = calculate_fee(3_000_000, GasPrice.from_string("0.025uaura"))

        assert fee.gas_limit == 3_000_000
        assert fee.amount == Coin(75000, "uaura")

    def test_rounds_up(self):
        fee = calculate_fee(1, GasPrice.from_string("0.025uaura"))

        assert fee.amount.amount == 1

    @pytest.mark.parametrize("gas_limit", [0, -1, 1.5, True, "100"])
    def test_rejects_invalid_gas_limit(self, gas_limit):
        with pytest.raises(ValueError):
            calculate_fee(gas_limit, GasPrice.from_string("0.025uaura"))


class TestGasCalculator:

    def test_upload_fee_uses_fixed_limit(self):
        calculator = GasCalculator(GasPrice.from_string("0.1ustake"))

        fee = calculator.upload_fee()

        assert fee.gas_limit == UPLOAD_GAS_LIMIT
        assert fee.amount == Coin(300000, "ustake")

    def test_auto_mode(self):
        assert GasCalculator(GasPrice.from_string("0.1ustake")).auto == AUTO == "auto"
