import asyncio
from typing import Any, Awaitable, List, Optional, TypeVar

from pydantic import BaseModel, ValidationError
from web3 import AsyncWeb3
from web3.middleware import ExtraDataToPOAMiddleware

from gas_fee_estimator.clients.blockchain.base_node import BaseNode, BlockIdentifier
from gas_fee_estimator.clients.blockchain.custom_http_provider import (
    AsyncCustomHTTPProvider,
)
from gas_fee_estimator.config import Config
from gas_fee_estimator.models.node_models import BlockSnapshot, FeeHistory
from gas_fee_estimator.utils.errors import InvalidResponseError
from gas_fee_estimator.utils.logger import LogArgs, get_logger

logger = get_logger(__name__)

T = TypeVar('T')
M = TypeVar('M', bound=BaseModel)


class Web3Client(BaseNode):
    NODE_NAME = 'web3'

    def __init__(self, uri: str, config: Config, w3: Optional[AsyncWeb3] = None):
        self.uri = uri
        self.timeout = config.WEB3_TIMEOUT
        if w3 is None:
            w3 = AsyncWeb3(AsyncCustomHTTPProvider(endpoint_uri=uri, config=config))
            # PoA chains put signer data into extraData, which breaks block decoding
            w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
        self.w3 = w3

    async def _call(self, awaitable: Awaitable[T]) -> T:
        return await asyncio.wait_for(awaitable, timeout=self.timeout)

    def _parse(self, model: type[M], method: str, response: Any) -> M:
        try:
            return model.model_validate(dict(response))
        except (ValidationError, TypeError) as e:
            log_args = {
                LogArgs.web3_url: self.uri,
                LogArgs.rpc_method: method,
                LogArgs.raw_response: response,
            }
            logger.error(
                f'Cannot parse %({LogArgs.rpc_method})s response '
                f'from %({LogArgs.web3_url})s: %({LogArgs.raw_response})s',
                log_args,
                extra=log_args,
            )
            raise InvalidResponseError(self.uri, str(e), method=method) from e

    async def get_block(self, block_identifier: BlockIdentifier) -> BlockSnapshot:
        logger.debug('Getting %s block from %s', block_identifier, self.uri)
        block = await self._call(self.w3.eth.get_block(block_identifier))
        return self._parse(BlockSnapshot, 'eth_getBlockByNumber', block)

    async def fee_history(
        self,
        block_count: int,
        newest_block: BlockIdentifier,
        reward_percentiles: List[float],
    ) -> FeeHistory:
        logger.debug(
            'Getting fee history for %s blocks up to %s from %s',
            block_count, newest_block, self.uri,
        )
        history = await self._call(
            self.w3.eth.fee_history(block_count, newest_block, reward_percentiles)
        )
        return self._parse(FeeHistory, 'eth_feeHistory', history)

    async def get_gas_price(self) -> int:
        return await self._call(self.w3.eth.gas_price)
