import re
from collections import Counter
from typing import Dict, Optional, Set, Tuple

import httpx
import structlog
from prometheus_client.parser import text_string_to_metric_families

from tsforward.errors import FetchError
from tsforward.models.metrics import (
    Bucket,
    Histogram,
    MetricFamily,
    MetricInstance,
    MetricType,
    Quantile,
    Scalar,
    Summary,
)

logger = structlog.get_logger(__name__)

_COUNTER_TYPE_RE = re.compile(r"^#\s*TYPE\s+(\S+)\s+counter\s*$", re.MULTILINE)
_TYPE_RE = re.compile(r"^#\s*TYPE\s+(\S+)\s+\S+\s*$", re.MULTILINE)

# The parser reports untyped families as "unknown"
_TYPE_TAGS = {
    "gauge": MetricType.GAUGE.value,
    "counter": MetricType.COUNTER.value,
    "untyped": MetricType.UNTYPED.value,
    "unknown": MetricType.UNTYPED.value,
    "summary": MetricType.SUMMARY.value,
    "histogram": MetricType.HISTOGRAM.value,
}

LabelKey = Tuple[Tuple[str, str], ...]


def _label_key(labels: Dict[str, str], drop: str) -> LabelKey:
    return tuple(sorted((k, v) for k, v in labels.items() if k != drop))


def _scalar_instances(metric, skip: Tuple[str, ...] = ()) -> list:
    return [
        MetricInstance(labels=dict(sample.labels), payload=Scalar(float(sample.value)))
        for sample in metric.samples
        if sample.name not in skip
    ]


def _summary_instances(metric) -> list:
    grouped: Dict[LabelKey, Summary] = {}
    for sample in metric.samples:
        key = _label_key(sample.labels, "quantile")
        summary = grouped.setdefault(key, Summary())
        if sample.name == metric.name + "_sum":
            summary.sample_sum = float(sample.value)
        elif sample.name == metric.name + "_count":
            summary.sample_count = float(sample.value)
        elif sample.name == metric.name and "quantile" in sample.labels:
            summary.quantiles.append(
                Quantile(quantile=float(sample.labels["quantile"]), value=float(sample.value))
            )
    return [MetricInstance(labels=dict(key), payload=summary) for key, summary in grouped.items()]


def _histogram_instances(metric) -> list:
    grouped: Dict[LabelKey, Histogram] = {}
    for sample in metric.samples:
        key = _label_key(sample.labels, "le")
        histogram = grouped.setdefault(key, Histogram())
        if sample.name == metric.name + "_sum":
            histogram.sample_sum = float(sample.value)
        elif sample.name == metric.name + "_count":
            histogram.sample_count = float(sample.value)
        elif sample.name == metric.name + "_bucket" and "le" in sample.labels:
            histogram.buckets.append(
                Bucket(upper_bound=float(sample.labels["le"]), cumulative_count=float(sample.value))
            )
    return [
        MetricInstance(labels=dict(key), payload=histogram) for key, histogram in grouped.items()
    ]


def _to_family(metric, declared_counters: Set[str]) -> MetricFamily:
    tag = _TYPE_TAGS.get(metric.type, metric.type)
    name = metric.name

    if tag == MetricType.COUNTER:
        # The parser strips "_total" from counter names; restore the declared one
        if name + "_total" in declared_counters:
            name = name + "_total"
        instances = _scalar_instances(metric, skip=(metric.name + "_created",))
    elif tag == MetricType.SUMMARY:
        instances = _summary_instances(metric)
    elif tag == MetricType.HISTOGRAM:
        instances = _histogram_instances(metric)
    else:
        instances = _scalar_instances(metric)

    return MetricFamily(name=name, type=tag, metrics=instances)


def parse_metric_families(text: str) -> Dict[str, MetricFamily]:
    """Decode a text exposition payload into families keyed by exposed name"""
    declared_counters = set(_COUNTER_TYPE_RE.findall(text))
    declared = Counter(_TYPE_RE.findall(text))
    duplicates = sorted(name for name, count in declared.items() if count > 1)
    if duplicates:
        raise FetchError(f"metric families declared more than once: {', '.join(duplicates)}")
    families: Dict[str, MetricFamily] = {}
    try:
        for metric in text_string_to_metric_families(text):
            family = _to_family(metric, declared_counters)
            existing = families.get(family.name)
            if existing is None:
                families[family.name] = family
            elif existing.type == family.type:
                # Samples without a TYPE line arrive as one family per line
                existing.metrics.extend(family.metrics)
            else:
                raise FetchError(
                    f"metric family {family.name} declared as both {existing.type} and {family.type}"
                )
    except (ValueError, IndexError) as e:
        raise FetchError(f"malformed exposition payload: {str(e)}") from e
    return families


async def fetch_metric_families(
    url: str,
    timeout: float = 10.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Dict[str, MetricFamily]:
    try:
        async with httpx.AsyncClient(
            timeout=timeout, transport=transport, follow_redirects=True
        ) as client:
            response = await client.get(url)
    except httpx.HTTPError as e:
        raise FetchError(f"request to {url} failed: {str(e)}") from e

    if not response.is_success:
        raise FetchError(f"invalid HTTP response status code {response.status_code} from {url}")

    families = parse_metric_families(response.text)
    logger.debug("Fetched metric families", url=url, families=len(families))
    return families
