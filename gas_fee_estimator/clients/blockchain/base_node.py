from abc import ABC, abstractmethod
from typing import List, Union

from gas_fee_estimator.models.node_models import BlockSnapshot, FeeHistory

BlockIdentifier = Union[str, int]


class BaseNode(ABC):
    """
    Read-only view of an EVM node, everything the gas estimation needs from the chain.
    Implementations must not cache blocks or fee history between calls.
    """
    NODE_NAME = 'base_node'

    @abstractmethod
    async def get_block(self, block_identifier: BlockIdentifier) -> BlockSnapshot:
        """
        Fetch a block header.
        Args:
            block_identifier: 'latest', 'pending' or a block number

        Returns:
            BlockSnapshot with gas used, gas limit and base fee of the block
        """

    @abstractmethod
    async def fee_history(
        self,
        block_count: int,
        newest_block: BlockIdentifier,
        reward_percentiles: List[float],
    ) -> FeeHistory:
        """
        Call eth_feeHistory.
        Args:
            block_count: how many blocks to sample, ending at newest_block
            newest_block: 'latest', 'pending' or a block number
            reward_percentiles: priority fee percentiles to report per block

        Returns:
            FeeHistory. Its reward is None when the node doesn't report rewards.
        """

    @abstractmethod
    async def get_gas_price(self) -> int:
        """Legacy gas price, eth_gasPrice."""
