from .batch import BatchConfig, ResolvedBatchConfig, get_batch_config, resolve_batch_config
from .log import LogConsumerConfig, ResolvedLogConfig, RotateMode, resolve_log_config

__all__ = [
    "BatchConfig",
    "ResolvedBatchConfig",
    "get_batch_config",
    "resolve_batch_config",
    "LogConsumerConfig",
    "ResolvedLogConfig",
    "RotateMode",
    "resolve_log_config",
]
