from typing import List, Union

from .base import BaseExtractor, ExpandedPoint
from tsforward.models.metrics import Histogram, Summary
from tsforward.utils.formatters import format_float


def _sum_and_count(payload: Union[Summary, Histogram]) -> List[ExpandedPoint]:
    return [
        (float(payload.sample_sum), {"mode": "sum"}),
        (float(payload.sample_count), {"mode": "count"}),
    ]


class SummaryExtractor(BaseExtractor):
    payload_type = Summary

    def expand(self, payload: Summary) -> List[ExpandedPoint]:
        points = _sum_and_count(payload)
        for quantile in payload.quantiles:
            points.append(
                (
                    float(quantile.value),
                    {"mode": "quantile", "quantile": format_float(quantile.quantile)},
                )
            )
        return points


class HistogramExtractor(BaseExtractor):
    payload_type = Histogram

    def expand(self, payload: Histogram) -> List[ExpandedPoint]:
        points = _sum_and_count(payload)
        for bucket in payload.buckets:
            points.append(
                (
                    float(bucket.cumulative_count),
                    {"mode": "bucket", "le": format_float(bucket.upper_bound)},
                )
            )
        return points
