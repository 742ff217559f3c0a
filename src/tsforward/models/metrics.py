from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Union


class MetricType(str, Enum):
    GAUGE = "gauge"
    COUNTER = "counter"
    UNTYPED = "untyped"
    SUMMARY = "summary"
    HISTOGRAM = "histogram"


class MetricKind(str, Enum):
    GAUGE = "GAUGE"


@dataclass
class Quantile:
    quantile: float
    value: float


@dataclass
class Bucket:
    upper_bound: float
    cumulative_count: float


@dataclass
class Scalar:
    value: float


@dataclass
class Summary:
    sample_sum: float = 0.0
    sample_count: float = 0.0
    quantiles: List[Quantile] = field(default_factory=list)


@dataclass
class Histogram:
    sample_sum: float = 0.0
    sample_count: float = 0.0
    buckets: List[Bucket] = field(default_factory=list)


Payload = Union[Scalar, Summary, Histogram]


@dataclass
class MetricInstance:
    labels: Dict[str, str]
    payload: Payload


@dataclass
class MetricFamily:
    """One exposed metric family as decoded from a single scrape.

    ``type`` holds the exposition type tag. Tags outside ``MetricType`` are
    passed through untouched so translation can reject them.
    """

    name: str
    type: str
    metrics: List[MetricInstance] = field(default_factory=list)


@dataclass
class Resource:
    type: str
    labels: Dict[str, str] = field(default_factory=dict)


@dataclass
class NormalizedSeries:
    metric_type: str
    metric_kind: MetricKind
    labels: Dict[str, str]
    resource: Resource
    value: float
    timestamp: int
