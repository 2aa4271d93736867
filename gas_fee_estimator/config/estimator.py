from enum import Enum
from typing import Union

from pydantic_settings import BaseSettings


class BaseFeeAdjustment(str, Enum):
    # base fee goes down by 12.5% when the block is at or under target usage
    SYMMETRIC = 'symmetric'
    # base fee always goes up by 12.5%, whatever the block usage
    INCREASE_ONLY = 'increase_only'


class EstimatorConfig(BaseSettings):
    FEE_HISTORY_BLOCK_COUNT: int = 3
    FEE_HISTORY_NEWEST_BLOCK: Union[int, str] = 'latest'
    SLOW_PERCENTILE: float = 10
    STANDARD_PERCENTILE: float = 50
    FAST_PERCENTILE: float = 90
    BASE_FEE_ADJUSTMENT: BaseFeeAdjustment = BaseFeeAdjustment.SYMMETRIC
