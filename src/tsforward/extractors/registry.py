from typing import Dict, Optional, Union

import structlog

from .base import BaseExtractor
from .distribution import HistogramExtractor, SummaryExtractor
from .scalar import ScalarExtractor
from tsforward.errors import TranslateError
from tsforward.models.metrics import MetricType

logger = structlog.get_logger(__name__)


def _key(metric_type: Union[MetricType, str]) -> str:
    # Enum members hash by name, so key on the plain tag
    return metric_type.value if isinstance(metric_type, MetricType) else metric_type


class ExtractorRegistry:
    def __init__(self):
        self.extractors: Dict[str, BaseExtractor] = {}

    def register(self, metric_type: Union[MetricType, str], extractor: BaseExtractor):
        self.extractors[_key(metric_type)] = extractor

    def get_extractor(self, metric_type: Union[MetricType, str]) -> Optional[BaseExtractor]:
        return self.extractors.get(_key(metric_type))

    def require(self, metric_type: Union[MetricType, str]) -> BaseExtractor:
        extractor = self.get_extractor(metric_type)
        if extractor is None:
            logger.debug("No extractor registered", metric_type=metric_type)
            raise TranslateError(f"unknown metric type: {metric_type!r}")
        return extractor

    @classmethod
    def default(cls) -> "ExtractorRegistry":
        """Registry covering every exposition type"""
        registry = cls()
        scalar = ScalarExtractor()
        registry.register(MetricType.GAUGE, scalar)
        registry.register(MetricType.COUNTER, scalar)
        registry.register(MetricType.UNTYPED, scalar)
        registry.register(MetricType.SUMMARY, SummaryExtractor())
        registry.register(MetricType.HISTOGRAM, HistogramExtractor())
        return registry
