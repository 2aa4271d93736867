from unittest.mock import AsyncMock

import pytest

from gas_fee_estimator.config import BaseFeeAdjustment
from gas_fee_estimator.models.node_models import BlockSnapshot
from gas_fee_estimator.services.base_fee_predictor import predict_next_base_fee
from gas_fee_estimator.services.gas_service import GasService


def test_predict_next_base_fee_busy_block():
    block = BlockSnapshot(gas_used=80, gas_limit=100, base_fee_per_gas=1000)
    assert predict_next_base_fee(block) == 1250
    assert predict_next_base_fee(block, BaseFeeAdjustment.INCREASE_ONLY) == 1250


@pytest.mark.parametrize('gas_used', [0, 20, 50])
def test_predict_next_base_fee_quiet_block_goes_down(gas_used: int):
    block = BlockSnapshot(gas_used=gas_used, gas_limit=100, base_fee_per_gas=1000)
    assert predict_next_base_fee(block, BaseFeeAdjustment.SYMMETRIC) == 875


@pytest.mark.parametrize('gas_used', [0, 20, 50])
def test_predict_next_base_fee_quiet_block_increase_only(gas_used: int):
    block = BlockSnapshot(gas_used=gas_used, gas_limit=100, base_fee_per_gas=1000)
    assert predict_next_base_fee(block, BaseFeeAdjustment.INCREASE_ONLY) == 1250


def test_predict_next_base_fee_rounds_down():
    # odd gas limit: target is 50, so 51 is over target
    block = BlockSnapshot(gas_used=51, gas_limit=101, base_fee_per_gas=7)
    assert predict_next_base_fee(block) == 8  # 8.75
    block = BlockSnapshot(gas_used=50, gas_limit=101, base_fee_per_gas=7)
    assert predict_next_base_fee(block) == 6  # 6.125


@pytest.mark.asyncio()
async def test_get_next_base_fee_uses_latest_block(gas_service: GasService, node: AsyncMock):
    assert await gas_service.get_next_base_fee() == 1250
    node.get_block.assert_awaited_once_with('latest')


@pytest.mark.asyncio()
async def test_get_next_base_fee_uses_configured_adjustment(config, node: AsyncMock):
    node.get_block.side_effect = None
    node.get_block.return_value = BlockSnapshot(
        gas_used=10, gas_limit=100, base_fee_per_gas=1000
    )
    config.BASE_FEE_ADJUSTMENT = BaseFeeAdjustment.INCREASE_ONLY
    assert await GasService(config=config, node=node).get_next_base_fee() == 1250
    config.BASE_FEE_ADJUSTMENT = BaseFeeAdjustment.SYMMETRIC
    assert await GasService(config=config, node=node).get_next_base_fee() == 875


@pytest.mark.asyncio()
async def test_get_next_base_fee_propagates_node_errors(gas_service: GasService, node: AsyncMock):
    node.get_block.side_effect = ConnectionError('node is down')
    with pytest.raises(ConnectionError):
        await gas_service.get_next_base_fee()
