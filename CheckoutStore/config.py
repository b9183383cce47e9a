"""Store configuration.

Holds the Nth-order promotion settings and the logging level. Values can be
given directly or read from ``CHECKOUT_STORE_*`` environment variables.
"""
import os
from decimal import Decimal
from typing import Mapping, Optional

from pydantic import field_validator
from pydantic.dataclasses import dataclass

ENV_PREFIX = "CHECKOUT_STORE_"


@dataclass
class StoreConfig:
    """Configuration for a store instance.

    Attributes:
        nth_order_for_discount: A discount code becomes available after every Nth order
        discount_percent: Percentage granted by issued codes
        discount_code_length: Number of characters in generated codes
        log_level: Level passed to logging setup by entry points
    """
    nth_order_for_discount: int = 2
    discount_percent: Decimal = Decimal(10)
    discount_code_length: int = 8
    log_level: str = "INFO"

    @field_validator("nth_order_for_discount")
    @classmethod
    def validate_nth_order(cls, v):
        if v < 1:
            raise ValueError("nth_order_for_discount must be at least 1")
        return v

    @field_validator("discount_percent")
    @classmethod
    def validate_discount_percent(cls, v):
        if v <= 0 or v > 100:
            raise ValueError("discount_percent must be within (0, 100]")
        return v

    @field_validator("discount_code_length")
    @classmethod
    def validate_code_length(cls, v):
        if v < 4:
            raise ValueError("discount_code_length must be at least 4")
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v):
        return v.upper()

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "StoreConfig":
        """Build a config from environment variables, falling back to defaults."""
        environ = os.environ if environ is None else environ
        values = {}
        for field_name, env_name in (
                ("nth_order_for_discount", "NTH_ORDER"),
                ("discount_percent", "DISCOUNT_PERCENT"),
                ("discount_code_length", "CODE_LENGTH"),
                ("log_level", "LOG_LEVEL")):
            raw = environ.get(ENV_PREFIX + env_name)
            if raw is not None and raw != "":
                values[field_name] = raw
        return cls(**values)
