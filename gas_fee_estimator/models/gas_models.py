from typing import List, Optional

from pydantic import BaseModel, ConfigDict, confloat, model_validator
from pydantic.alias_generators import to_camel

Percentile = confloat(ge=0, le=100)


class FeePercentiles(BaseModel):
    """
    Reward percentiles requested from the node, one per fee tier.
    Immutable, so one estimation can't change the percentiles of another.
    """
    model_config = ConfigDict(frozen=True)

    slow: Percentile = 10
    standard: Percentile = 50
    fast: Percentile = 90

    @model_validator(mode='after')
    def check_order(self) -> 'FeePercentiles':
        if not self.slow <= self.standard <= self.fast:
            raise ValueError(
                f'Percentiles must be ordered slow <= standard <= fast, '
                f'got {self.slow}, {self.standard}, {self.fast}'
            )
        return self

    def as_list(self) -> List[float]:
        return [self.slow, self.standard, self.fast]


class RewardAverages(BaseModel):
    slow: int = 0
    standard: int = 0
    fast: int = 0


class GasFeeData(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    max_fee_per_gas: Optional[int] = None
    max_priority_fee_per_gas: Optional[int] = None
    gas_price: Optional[int] = None

    @model_validator(mode='after')
    def check_populated(self) -> 'GasFeeData':
        if (
            self.max_fee_per_gas is None
            and self.max_priority_fee_per_gas is None
            and self.gas_price is None
        ):
            raise ValueError('At least one fee field must be set')
        return self


class GasEstimation(BaseModel):
    fast: GasFeeData
    standard: GasFeeData
    slow: GasFeeData
