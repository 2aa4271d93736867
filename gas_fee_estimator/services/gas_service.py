import asyncio
from typing import Any, Awaitable, List, Optional, Sequence

from gas_fee_estimator.clients.blockchain.base_node import BaseNode
from gas_fee_estimator.clients.blockchain.web3_client import Web3Client
from gas_fee_estimator.config import Config
from gas_fee_estimator.models.gas_models import (
    FeePercentiles,
    GasEstimation,
    GasFeeData,
)
from gas_fee_estimator.models.node_models import FeeHistory
from gas_fee_estimator.services.base_fee_predictor import predict_next_base_fee
from gas_fee_estimator.services.reward_aggregator import aggregate_rewards
from gas_fee_estimator.utils.errors import InvalidResponseError
from gas_fee_estimator.utils.logger import LogArgs, get_logger

logger = get_logger(__name__)


def analyze_base_fees(
    base_fees: Sequence[int],
    percentiles: FeePercentiles,
    node: str = 'unknown',
) -> List[int]:
    """
    Pick the slow, standard and fast percentile of base fees by rank.
    Values are sorted ascending and taken at index floor(len * percentile / 100),
    capped at the last element so the 100th percentile is the max.
    """
    if not base_fees:
        raise InvalidResponseError(node, 'Fee history has no base fees')
    ordered = sorted(base_fees)
    last = len(ordered) - 1
    return [
        ordered[min(int(len(ordered) * percentile / 100), last)]
        for percentile in percentiles.as_list()
    ]


async def gather_or_cancel(*aws: Awaitable[Any]) -> List[Any]:
    """
    Await all of aws concurrently. If one fails, the others are cancelled
    and awaited before the error is raised.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


def sort_descending(values: Sequence[int]) -> List[int]:
    # sorted() is stable, equal values keep their input order
    return sorted(values, reverse=True)


class GasService:
    def __init__(self, config: Config, node: BaseNode):
        self.config = config
        self.node = node

    @property
    def node_name(self) -> str:
        return getattr(self.node, 'uri', self.node.NODE_NAME)

    async def get_next_base_fee(self) -> int:
        block = await self.node.get_block('latest')
        return predict_next_base_fee(block, self.config.BASE_FEE_ADJUSTMENT)

    async def get_pending_base_fee(self) -> int:
        block = await self.node.get_block('pending')
        return block.base_fee_per_gas

    async def get_fee_history(self, percentiles: FeePercentiles) -> FeeHistory:
        history = await self.node.fee_history(
            self.config.FEE_HISTORY_BLOCK_COUNT,
            self.config.FEE_HISTORY_NEWEST_BLOCK,
            percentiles.as_list(),
        )
        if history.reward is None:
            log_args = {
                LogArgs.web3_url: self.node_name,
                LogArgs.percentiles: percentiles.as_list(),
                LogArgs.raw_response: history.model_dump(by_alias=True),
            }
            logger.error(
                f'Node %({LogArgs.web3_url})s returned fee history without reward: '
                f'%({LogArgs.raw_response})s',
                log_args,
                extra=log_args,
            )
            raise InvalidResponseError(
                self.node_name, 'Fee history has no reward field'
            )
        return history

    async def get_gas_fee_data(
        self, percentiles: Optional[FeePercentiles] = None
    ) -> GasEstimation:
        """
        Estimate fast, standard and slow fees from the node.

        max_fee_per_gas of each tier is taken from five base fee candidates
        sorted from highest to lowest: the pending block base fee, the predicted
        next base fee and the slow/standard/fast percentiles of recent base fees.
        max_priority_fee_per_gas is the average reward of the tier percentile,
        gas_price is the node's legacy gas price.
        """
        percentiles = percentiles or self.config.percentiles
        logger.debug(
            'Getting gas fee data from %s for percentiles %s',
            self.node_name, percentiles.as_list(),
        )
        history = await self.get_fee_history(percentiles)
        rewards = aggregate_rewards(history, percentiles, node=self.node_name)

        pending_base_fee, next_base_fee, gas_price = await gather_or_cancel(
            self.get_pending_base_fee(),
            self.get_next_base_fee(),
            self.node.get_gas_price(),
        )
        estimated_base_fees = sort_descending([
            pending_base_fee,
            next_base_fee,
            *analyze_base_fees(history.base_fee_per_gas, percentiles, node=self.node_name),
        ])

        return GasEstimation(
            fast=GasFeeData(
                max_fee_per_gas=estimated_base_fees[0],
                max_priority_fee_per_gas=rewards.fast,
                gas_price=gas_price,
            ),
            standard=GasFeeData(
                max_fee_per_gas=estimated_base_fees[1],
                max_priority_fee_per_gas=rewards.standard,
                gas_price=gas_price,
            ),
            slow=GasFeeData(
                max_fee_per_gas=estimated_base_fees[2],
                max_priority_fee_per_gas=rewards.slow,
                gas_price=gas_price,
            ),
        )

    async def get_gas_fee_data_for_type_1_and_2(
        self, percentiles: Optional[FeePercentiles] = None
    ) -> GasEstimation:
        """Gas fees usable for both legacy (gas_price) and EIP-1559 transactions."""
        estimation = await self.get_gas_fee_data(percentiles)
        log_args = {
            LogArgs.web3_url: self.node_name,
            LogArgs.estimation: estimation.model_dump(by_alias=True),
        }
        logger.debug(
            f'Gas estimation from %({LogArgs.web3_url})s: %({LogArgs.estimation})s',
            log_args,
            extra=log_args,
        )
        return estimation


def create_gas_service(config: Config) -> GasService:
    return GasService(config=config, node=Web3Client(config.WEB3_URL, config))
