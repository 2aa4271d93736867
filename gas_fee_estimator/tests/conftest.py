import pytest

from gas_fee_estimator.config import Config
from gas_fee_estimator.services.gas_service import GasService
from gas_fee_estimator.tests.fixtures.node import node  # noqa: F401


@pytest.fixture()
def config() -> Config:
    return Config(_env_file=None)


@pytest.fixture()
def gas_service(config, node) -> GasService:
    return GasService(config=config, node=node)
