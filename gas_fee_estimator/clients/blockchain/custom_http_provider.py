"""
Custom implementation of async HTTP provider.
Majority of the code was copied and adapted from Web3 library.
Requests are never retried here, a failing node call fails the estimation.
"""
import asyncio
import threading
from typing import Any, Set, Tuple

from aiohttp import ClientSession, ClientTimeout, TCPConnector
from eth_typing import URI
from lru import LRU
from web3 import AsyncHTTPProvider
from web3.types import RPCEndpoint, RPCResponse

from gas_fee_estimator.config import Config
from gas_fee_estimator.utils.logger import LogArgs, get_logger

_logger = get_logger(__name__)

# aiohttp sessions are bound to the loop they were created in,
# so sessions are cached per (endpoint, loop)
SessionKey = Tuple[URI, asyncio.AbstractEventLoop]

SESSION_CACHE_SIZE = 100

# strong references to pending closes, the loop only keeps weak ones
_session_close_tasks: Set[Any] = set()


def _close_session(loop: asyncio.AbstractEventLoop, session: ClientSession) -> None:
    if loop.is_closed():
        # connections died with their loop, nothing left to close
        session.detach()
        return
    if loop is asyncio.get_running_loop():
        task = loop.create_task(session.close())
    else:
        task = asyncio.run_coroutine_threadsafe(session.close(), loop)
    _session_close_tasks.add(task)
    task.add_done_callback(_session_close_tasks.discard)


def _on_async_session_evicted_from_cache(cache_key: SessionKey, session: ClientSession) -> None:
    # eviction happens inside _get_async_session, so there is a running loop
    endpoint_uri, loop = cache_key
    _close_session(loop, session)
    log_args = {
        LogArgs.web3_url: endpoint_uri,
        LogArgs.cache_size: len(_async_session_cache),
    }
    _logger.info(
        f"Closed async http session: %({LogArgs.web3_url})s", log_args, extra=log_args
    )


_async_session_cache_lock = threading.Lock()
_async_session_cache = LRU(SESSION_CACHE_SIZE, callback=_on_async_session_evicted_from_cache)


def _drop_sessions_of_closed_loops() -> None:
    with _async_session_cache_lock:
        dead_keys = [key for key in _async_session_cache.keys() if key[1].is_closed()]
        for key in dead_keys:
            session = _async_session_cache[key]
            del _async_session_cache[key]
            session.detach()


async def _get_async_session(endpoint_uri: URI) -> ClientSession:
    _drop_sessions_of_closed_loops()
    cache_key = (endpoint_uri, asyncio.get_running_loop())
    if cache_key not in _async_session_cache or _async_session_cache[cache_key].closed:
        connector = TCPConnector(limit=32)
        session = ClientSession(connector=connector, raise_for_status=True)
        with _async_session_cache_lock:
            _async_session_cache[cache_key] = session
            log_args = {
                LogArgs.web3_url: endpoint_uri,
                LogArgs.cache_size: len(_async_session_cache),
            }
            _logger.info(
                f"Created async http session: %({LogArgs.web3_url})s",
                log_args,
                extra=log_args,
            )

    return _async_session_cache[cache_key]


async def close_async_sessions() -> None:
    """
    Close the sessions of the running loop, e.g. before the loop is shut down.
    Sessions left over from closed loops are dropped as well.
    """
    _drop_sessions_of_closed_loops()
    loop = asyncio.get_running_loop()
    with _async_session_cache_lock:
        keys = [key for key in _async_session_cache.keys() if key[1] is loop]
        sessions = [_async_session_cache[key] for key in keys]
        for key in keys:
            del _async_session_cache[key]
    for session in sessions:
        await session.close()


async def _async_make_post_request(
    endpoint_uri: URI,
    data: bytes,
    config: Config,
    **kwargs: Any,
) -> bytes:
    kwargs.setdefault("timeout", ClientTimeout(total=config.WEB3_TIMEOUT))
    session = await _get_async_session(endpoint_uri)
    async with session.post(endpoint_uri, data=data, **kwargs) as response:
        response.raise_for_status()
        return await response.read()


class AsyncCustomHTTPProvider(AsyncHTTPProvider):
    def __init__(self, endpoint_uri: URI, config: Config, *args: Any, **kwargs: Any):
        super().__init__(endpoint_uri, *args, **kwargs)
        self.config = config

    async def make_request(self, method: RPCEndpoint, params: Any) -> RPCResponse:
        self.logger.debug(
            "Making request HTTP. URI: %s, Method: %s", self.endpoint_uri, method
        )
        request_data = self.encode_rpc_request(method, params)
        raw_response = await _async_make_post_request(
            self.endpoint_uri,
            request_data,
            self.config,
            **self.get_request_kwargs(),
        )
        response = self.decode_rpc_response(raw_response)
        self.logger.debug(
            "Getting response HTTP. URI: %s, " "Method: %s, Response: %s",
            self.endpoint_uri,
            method,
            response,
        )
        return response
