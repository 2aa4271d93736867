from gas_fee_estimator.utils.logger import LogArgs


class BaseGasEstimationError(Exception):
    """common error for gas estimation"""
    msg_to_log = 'Gas estimation failed'

    def __init__(self, node: str, message: str = None, **kwargs):
        self.node = node
        self.message = message
        self.kwargs = kwargs

    def __str__(self):
        return f'{self.msg_to_log}. Source: {self.node}'

    def __repr__(self):
        return f'{self.__class__.__name__}({self.node}, {self.message}, {self.kwargs})'

    def to_dict(self):
        return {
            'node': self.node,
            'reason': self.message,
            **self.kwargs,
        }

    def to_log_args(self):
        return (
            f'{self.msg_to_log.lower()}. Source: %({LogArgs.web3_url})s',
            {LogArgs.web3_url: self.node}
        )


class InvalidResponseError(BaseGasEstimationError):
    """When node returns a payload we can't estimate from, e.g. fee history without rewards"""
    msg_to_log = 'Invalid response'
