import asyncio
import json
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest
from lru import LRU

from gas_fee_estimator.clients.blockchain import custom_http_provider
from gas_fee_estimator.clients.blockchain.custom_http_provider import (
    _get_async_session,
    close_async_sessions,
)
from gas_fee_estimator.services.gas_service import create_gas_service

NODE_URL = 'http://127.0.0.1:8545'

BLOCKS = {
    'latest': {'gasUsed': hex(80), 'gasLimit': hex(100), 'baseFeePerGas': hex(1000)},
    'pending': {'gasUsed': hex(10), 'gasLimit': hex(100), 'baseFeePerGas': hex(1100)},
}
FEE_HISTORY = {
    'oldestBlock': hex(581399),
    'baseFeePerGas': [hex(900), hex(1000), hex(1200), hex(1050)],
    'gasUsedRatio': [0.8, 0.2, 0.5],
    'reward': [
        [hex(1), hex(2), hex(3)],
        [hex(0), hex(5), hex(6)],
        [hex(3), hex(4), hex(5)],
    ],
}
GAS_PRICE = 777


class JsonRpcHandler(BaseHTTPRequestHandler):
    def do_POST(self):
        request = json.loads(self.rfile.read(int(self.headers['Content-Length'])))
        method = request['method']
        if method == 'eth_getBlockByNumber':
            result = {
                'number': hex(581401),
                'hash': '0x' + '11' * 32,
                'extraData': '0x',
                'timestamp': hex(1700000000),
                **BLOCKS[request['params'][0]],
            }
        elif method == 'eth_feeHistory':
            result = FEE_HISTORY
        elif method == 'eth_gasPrice':
            result = hex(GAS_PRICE)
        else:
            result = None
        body = json.dumps({'jsonrpc': '2.0', 'id': request['id'], 'result': result}).encode()
        self.send_response(200)
        self.send_header('Content-Type', 'application/json')
        self.send_header('Content-Length', str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, *args):
        pass


@pytest.fixture()
def json_rpc_url():
    server = ThreadingHTTPServer(('127.0.0.1', 0), JsonRpcHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f'http://127.0.0.1:{server.server_address[1]}'
    server.shutdown()
    server.server_close()


@pytest.fixture(autouse=True)
def session_cache():
    custom_http_provider._async_session_cache.clear()
    yield custom_http_provider._async_session_cache
    custom_http_provider._async_session_cache.clear()


def test_estimation_on_consecutive_event_loops(json_rpc_url, config, session_cache):
    config.WEB3_URL = json_rpc_url
    service = create_gas_service(config)

    async def estimate_and_close():
        try:
            return await service.get_gas_fee_data_for_type_1_and_2()
        finally:
            await close_async_sessions()

    first = asyncio.run(service.get_gas_fee_data_for_type_1_and_2())
    second = asyncio.run(estimate_and_close())

    assert first == second
    assert second.fast.max_fee_per_gas == 1250
    assert second.fast.max_priority_fee_per_gas == 4
    assert second.slow.gas_price == GAS_PRICE
    assert len(session_cache) == 0


def test_sessions_of_closed_loops_are_dropped(session_cache):
    stale = asyncio.run(_get_async_session(NODE_URL))

    async def get_fresh_session():
        session = await _get_async_session(NODE_URL)
        assert len(session_cache) == 1
        await close_async_sessions()
        return session

    fresh = asyncio.run(get_fresh_session())
    assert fresh is not stale
    assert stale.closed
    assert fresh.closed
    assert len(session_cache) == 0


@pytest.mark.asyncio()
async def test_session_is_reused_within_loop(session_cache):
    session = await _get_async_session(NODE_URL)
    assert await _get_async_session(NODE_URL) is session
    await close_async_sessions()


@pytest.mark.asyncio()
async def test_close_async_sessions(session_cache):
    sessions = [
        await _get_async_session('http://node-1'),
        await _get_async_session('http://node-2'),
    ]
    await close_async_sessions()
    assert all(session.closed for session in sessions)
    assert len(session_cache) == 0


@pytest.mark.asyncio()
async def test_evicted_session_is_closed(monkeypatch):
    cache = LRU(1, callback=custom_http_provider._on_async_session_evicted_from_cache)
    monkeypatch.setattr(custom_http_provider, '_async_session_cache', cache)

    first = await _get_async_session('http://node-1')
    second = await _get_async_session('http://node-2')
    assert len(cache) == 1

    await asyncio.gather(*list(custom_http_provider._session_close_tasks))
    await asyncio.sleep(0)
    assert first.closed
    assert not second.closed
    assert not custom_http_provider._session_close_tasks
    await second.close()
