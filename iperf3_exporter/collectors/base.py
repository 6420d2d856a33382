"""Base collector abstract class for Prometheus custom collectors."""

from abc import ABC, abstractmethod
from typing import Any, Iterable, List
import logging
from functools import wraps

from prometheus_client.core import GaugeMetricFamily, Metric

from ..probe.models import ProbeResult
from ..utils.status import FailureKind
from ..utils.metrics import LABEL_NAMES, METRIC_HELP, metric_name


class BaseCollector(ABC):
    """
    Abstract base class for collectors registered on a prometheus_client registry.

    The registry calls describe() once at registration time and collect()
    on every scrape.
    """

    def __init__(self, config: Any, logger: logging.Logger):
        """
        Initialize base collector.

        Args:
            config: Collector-specific configuration
            logger: Logger instance
        """
        self.config = config
        self.logger = logger.getChild(self.__class__.__name__)

    @abstractmethod
    def describe(self) -> Iterable[Metric]:
        """
        Enumerate every metric family the collector may emit.

        Must not perform any collection work; the registry calls it when the
        collector is registered.
        """
        pass

    @abstractmethod
    def collect(self) -> Iterable[Metric]:
        """
        Collect metrics for one scrape.

        Returns:
            Iterable[Metric]: Metric families with their samples
        """
        pass

    def _describe_family(self, suffix: str) -> GaugeMetricFamily:
        return GaugeMetricFamily(metric_name(suffix), METRIC_HELP[suffix], labels=LABEL_NAMES)

    def _gauge(self, suffix: str, value: float, label_values: List[str]) -> GaugeMetricFamily:
        """
        Build a labelled gauge family holding a single sample.

        Args:
            suffix: Metric name without the namespace prefix
            value: Sample value
            label_values: Values for LABEL_NAMES, in order

        Returns:
            GaugeMetricFamily: Family with one sample
        """
        family = self._describe_family(suffix)
        family.add_metric(label_values, value)
        return family


def safe_probe(func):
    """
    Decorator that turns an unexpected exception from a probe into a failed result.

    A scrape must always produce a snapshot, so anything a runner raises is
    logged and reported as up=0 instead of propagating to the registry.

    Args:
        func: Collector method returning a ProbeResult

    Returns:
        Wrapped function that never raises
    """
    @wraps(func)
    def wrapper(self, *args, **kwargs):
        try:
            return func(self, *args, **kwargs)
        except Exception as e:
            self.logger.error(f"Probe failed: {e}", exc_info=True)
            return ProbeResult.failure(self.config.protocol, f"probe error: {e}", FailureKind.EXECUTION)
    return wrapper
