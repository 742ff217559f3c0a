from typing import List, Optional

import structlog

from tsforward.extractors.registry import ExtractorRegistry
from tsforward.models.config import TargetConfig
from tsforward.models.metrics import MetricFamily, MetricKind, NormalizedSeries
from tsforward.utils.formatters import format_metric_type
from tsforward.utils.time import timestamp_now
from tsforward.utils.utils import merge_labels

logger = structlog.get_logger(__name__)

_default_registry = ExtractorRegistry.default()


def to_time_series(
    config: TargetConfig,
    family: MetricFamily,
    registry: Optional[ExtractorRegistry] = None,
    timestamp: Optional[int] = None,
) -> List[NormalizedSeries]:
    """Translate one metric family into destination series.

    Each exposed instance expands into one or more points. Labels are merged
    with increasing precedence: the instance's own labels, the labels added by
    the expansion (``mode``, ``quantile``, ``le``), then the target's static
    labels. Raises ``TranslateError`` when the family's type has no extractor.
    """
    registry = registry or _default_registry
    extractor = registry.require(family.type)
    if timestamp is None:
        timestamp = timestamp_now()

    metric_type = format_metric_type(config.name_prefix, family.name)
    results = []
    for metric in family.metrics:
        for value, extra_labels in extractor.extract(metric):
            results.append(
                NormalizedSeries(
                    metric_type=metric_type,
                    metric_kind=MetricKind.GAUGE,
                    labels=merge_labels(metric.labels, extra_labels, config.static_labels),
                    resource=config.resource,
                    value=value,
                    timestamp=timestamp,
                )
            )

    logger.debug(
        "Translated family",
        family=family.name,
        metric_type=metric_type,
        series=len(results),
    )
    return results
