from gas_fee_estimator.config import BaseFeeAdjustment, Config
from gas_fee_estimator.models.gas_models import (
    FeePercentiles,
    GasEstimation,
    GasFeeData,
    RewardAverages,
)
from gas_fee_estimator.services.base_fee_predictor import predict_next_base_fee
from gas_fee_estimator.services.gas_service import (
    GasService,
    analyze_base_fees,
    create_gas_service,
    sort_descending,
)
from gas_fee_estimator.services.reward_aggregator import aggregate_rewards
from gas_fee_estimator.utils.errors import BaseGasEstimationError, InvalidResponseError

__all__ = [
    'BaseFeeAdjustment',
    'BaseGasEstimationError',
    'Config',
    'FeePercentiles',
    'GasEstimation',
    'GasFeeData',
    'GasService',
    'InvalidResponseError',
    'RewardAverages',
    'aggregate_rewards',
    'analyze_base_fees',
    'create_gas_service',
    'predict_next_base_fee',
    'sort_descending',
]
