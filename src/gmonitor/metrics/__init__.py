from gmonitor.metrics.batch_buffer import DEFAULT_GROUP_KEY, BatchBuffer
from gmonitor.metrics.cumulative import CumulativePolicy
from gmonitor.metrics.gauge import GaugePolicy
from gmonitor.metrics.merge_policy import MergePolicy
from gmonitor.metrics.metric import Metric
from gmonitor.metrics.timer import IntervalTimer

__all__ = [
    "DEFAULT_GROUP_KEY",
    "BatchBuffer",
    "CumulativePolicy",
    "GaugePolicy",
    "IntervalTimer",
    "MergePolicy",
    "Metric",
]
