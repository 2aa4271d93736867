from pydantic_settings import BaseSettings, SettingsConfigDict

from gas_fee_estimator.config.estimator import BaseFeeAdjustment, EstimatorConfig
from gas_fee_estimator.config.logger import LoggerConfig
from gas_fee_estimator.models.gas_models import FeePercentiles


class Config(EstimatorConfig, LoggerConfig, BaseSettings):
    WEB3_URL: str = 'https://rpc.cc3-testnet.creditcoin.network'
    WEB3_TIMEOUT: int = 10

    model_config = SettingsConfigDict(env_file='.env', extra='ignore')

    @property
    def percentiles(self) -> FeePercentiles:
        return FeePercentiles(
            slow=self.SLOW_PERCENTILE,
            standard=self.STANDARD_PERCENTILE,
            fast=self.FAST_PERCENTILE,
        )


config = Config()

__all__ = ['BaseFeeAdjustment', 'Config', 'config']
