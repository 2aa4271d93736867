from gas_fee_estimator.config.estimator import BaseFeeAdjustment
from gas_fee_estimator.models.node_models import BlockSnapshot

# 12.5% per block, the max base fee change allowed by EIP-1559
BASE_FEE_INCREASE = 1250
BASE_FEE_DECREASE = 875
BASE_FEE_DENOMINATOR = 1000


def predict_next_base_fee(
    block: BlockSnapshot,
    adjustment: BaseFeeAdjustment = BaseFeeAdjustment.SYMMETRIC,
) -> int:
    """
    Project the base fee of the block following `block`.
    Chain targets 50% of the gas limit: a fuller block raises the base fee by 12.5%,
    otherwise it goes down by 12.5%. With BaseFeeAdjustment.INCREASE_ONLY
    the base fee is raised in both cases.
    """
    target_gas_usage = block.gas_limit // 2
    if block.gas_used > target_gas_usage or adjustment == BaseFeeAdjustment.INCREASE_ONLY:
        return block.base_fee_per_gas * BASE_FEE_INCREASE // BASE_FEE_DENOMINATOR
    return block.base_fee_per_gas * BASE_FEE_DECREASE // BASE_FEE_DENOMINATOR
