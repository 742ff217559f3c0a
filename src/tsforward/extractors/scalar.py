from typing import List

from .base import BaseExtractor, ExpandedPoint
from tsforward.models.metrics import Scalar


class ScalarExtractor(BaseExtractor):
    """Gauges, counters and untyped metrics map to a single point with no extra labels"""

    payload_type = Scalar

    def expand(self, payload: Scalar) -> List[ExpandedPoint]:
        return [(float(payload.value), {})]
