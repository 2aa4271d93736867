from typing import List, Optional

from pydantic import BaseModel, ConfigDict, conint
from pydantic.alias_generators import to_camel

FeeSample = conint(ge=0)


class NodeModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra='ignore',
    )


class BlockSnapshot(NodeModel):
    number: Optional[int] = None
    gas_used: FeeSample
    gas_limit: FeeSample
    base_fee_per_gas: FeeSample


class FeeHistory(NodeModel):
    oldest_block: Optional[int] = None
    base_fee_per_gas: List[FeeSample] = []
    gas_used_ratio: List[float] = []
    # left as None when the node does not return it
    reward: Optional[List[List[FeeSample]]] = None
