from decimal import Decimal

import pytest
from pydantic import ValidationError

from CheckoutStore.config import StoreConfig


class TestStoreConfig:
    def test_defaults(self):
        config = StoreConfig()
        assert config.nth_order_for_discount == 2
        assert config.discount_percent == Decimal(10)
        assert config.discount_code_length == 8
        assert config.log_level == "INFO"

    @pytest.mark.parametrize("n", [0, -3])
    def test_nth_order_must_be_positive(self, n):
        with pytest.raises(ValidationError):
            StoreConfig(nth_order_for_discount=n)

    @pytest.mark.parametrize("percent", [Decimal(0), Decimal(150)])
    def test_discount_percent_range(self, percent):
        with pytest.raises(ValidationError):
            StoreConfig(discount_percent=percent)

    def test_code_length_minimum(self):
        with pytest.raises(ValidationError):
            StoreConfig(discount_code_length=2)

    def test_log_level_normalized(self):
        assert StoreConfig(log_level="debug").log_level == "DEBUG"


class TestFromEnv:
    def test_reads_prefixed_variables(self):
        config = StoreConfig.from_env({
            "CHECKOUT_STORE_NTH_ORDER": "5",
            "CHECKOUT_STORE_DISCOUNT_PERCENT": "15",
            "CHECKOUT_STORE_CODE_LENGTH": "12",
            "CHECKOUT_STORE_LOG_LEVEL": "warning",
        })
        assert config.nth_order_for_discount == 5
        assert config.discount_percent == Decimal(15)
        assert config.discount_code_length == 12
        assert config.log_level == "WARNING"

    def test_missing_and_blank_values_fall_back_to_defaults(self):
        config = StoreConfig.from_env({"CHECKOUT_STORE_NTH_ORDER": "", "UNRELATED": "1"})
        assert config == StoreConfig()

    def test_invalid_value_rejected(self):
        with pytest.raises(ValidationError):
            StoreConfig.from_env({"CHECKOUT_STORE_NTH_ORDER": "0"})
