from abc import ABC, abstractmethod
from typing import Dict, List, Tuple

from tsforward.errors import TranslateError
from tsforward.models.metrics import MetricInstance, Payload

# One destination point: its value and the labels the expansion adds
ExpandedPoint = Tuple[float, Dict[str, str]]


class BaseExtractor(ABC):
    payload_type: type

    def extract(self, metric: MetricInstance) -> List[ExpandedPoint]:
        """Expand one exposed metric instance into destination points"""
        if not isinstance(metric.payload, self.payload_type):
            raise TranslateError(
                f"unknown metric type: expected {self.payload_type.__name__} payload, "
                f"got {type(metric.payload).__name__}"
            )
        return self.expand(metric.payload)

    @abstractmethod
    def expand(self, payload: Payload) -> List[ExpandedPoint]:
        pass
