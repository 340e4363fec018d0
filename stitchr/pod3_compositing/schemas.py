"""
Schemas for compositing module
"""

from enum import Enum
from typing import Union


class CompositePolicy(str, Enum):
    """How overlapping pixels are combined"""
    SUM = "sum"  # saturating addition
    BLEND = "linear"  # distance-weighted linear feathering

    @classmethod
    def parse(cls, value: Union[str, "CompositePolicy", None]) -> "CompositePolicy":
        """Resolve a policy by value or name, defaulting to sum"""
        if isinstance(value, cls):
            return value
        if not value:
            return cls.SUM
        key = str(value).lower()
        if key == "blend":
            return cls.BLEND
        try:
            return cls(key)
        except ValueError:
            raise ValueError(
                f"Invalid composite policy: {value} (use 'sum' or 'linear')"
            ) from None
