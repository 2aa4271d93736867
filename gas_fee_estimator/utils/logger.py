from contextvars import ContextVar
from logging import LoggerAdapter, getLogger
from logging.config import dictConfig
from typing import Optional
from uuid import uuid4

from gas_fee_estimator.config import config
from gas_fee_estimator.config.logger import LoggerConfig

CORRELATION_ID = "cid"

# This field is keyword argument from <https://github.com/python/cpython/blob/3.10/Lib/logging/__init__.py#L1600>
#   and never changed.
EXTRA = "extra"

FORMATTERS = {
    'simple': {
        'format': '%(asctime)s - %(filename)s:%(lineno)s:%(funcName)s - %(levelname)s - %(message)s'
    },
    'logstash': {
        '()': 'logstash_formatter.LogstashFormatterV1'
    },
}


def make_logging_config(logger_config: LoggerConfig) -> dict:
    """
    Build a dictConfig for the handlers listed in LOG_HANDLERS.
    Handlers that aren't listed are left out, so logstash packages are only
    imported when logstash is actually used.
    """
    handlers = {
        'console': {
            'class': 'logging.StreamHandler',
            'level': logger_config.LOGGING_LEVEL,
            'formatter': 'simple',
            'stream': 'ext://sys.stdout'
        },
        'logstash': {
            'level': logger_config.LOGSTASH_LOGGING_LEVEL,
            'class': 'logstash_async.handler.AsynchronousLogstashHandler',
            'transport': 'logstash_async.transport.TcpTransport',
            'formatter': 'logstash',
            'host': logger_config.LOGSTASH,
            'port': logger_config.PORT,
            'database_path': None,
            'event_ttl': 30  # sec
        },
    }
    enabled = {name: handlers[name] for name in logger_config.LOG_HANDLERS}
    return dict(
        # See: <https://docs.python.org/3.7/library/logging.config.html#logging.config.fileConfig>
        # and find `disable_existing_loggers`, it's same configuration parameter as for dictConfig function.
        disable_existing_loggers=False,
        version=1,
        formatters={
            handler['formatter']: FORMATTERS[handler['formatter']]
            for handler in enabled.values()
        },
        handlers=enabled,
        root={
            'handlers': list(enabled),
            'level': logger_config.LOGGING_LEVEL,
        },
    )


CONFIG = make_logging_config(config)

correlation_id = ContextVar(CORRELATION_ID, default=uuid4().hex)


class CustomContextLogger(LoggerAdapter):

    def process(self, msg, kwargs):
        if EXTRA not in kwargs:
            kwargs[EXTRA] = dict(self.extra)
        else:
            kwargs[EXTRA].update(self.extra)

        # assigning a request correlation key to all log messages
        kwargs[EXTRA][CORRELATION_ID] = self.get_correlation_id()

        return msg, kwargs

    @staticmethod
    def get_correlation_id():
        return correlation_id.get()


class LogArgs:
    web3_url = "web3_url"
    rpc_method = "rpc_method"
    percentiles = "percentiles"
    raw_response = "raw_response"
    estimation = "estimation"
    cache_size = "cache_size"


def get_logger(name: str, extra: Optional[dict] = None, corr_id: Optional[str] = None) -> "CustomContextLogger":
    dictConfig(CONFIG)

    extra = extra or {}

    if corr_id:
        correlation_id.set(corr_id)

    logger = CustomContextLogger(getLogger(name), extra)
    return logger


def set_correlation_id(corr_id: str):
    correlation_id.set(corr_id)
