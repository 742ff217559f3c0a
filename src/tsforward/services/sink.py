from abc import ABC, abstractmethod
from typing import Optional, Sequence

import structlog
from google.api import metric_pb2 as ga_metric
from google.api_core import exceptions as google_exceptions
from google.cloud import monitoring_v3

from tsforward.errors import DispatchError
from tsforward.models.metrics import NormalizedSeries

logger = structlog.get_logger(__name__)


class Sink(ABC):
    @abstractmethod
    async def send(self, project: str, batch: Sequence[NormalizedSeries]) -> None:
        """Write one batch of series to the destination project"""
        pass


def to_pb_time_series(series: NormalizedSeries) -> monitoring_v3.TimeSeries:
    pb_series = monitoring_v3.TimeSeries()
    pb_series.metric.type = series.metric_type
    pb_series.metric.labels.update(series.labels)
    pb_series.resource.type = series.resource.type
    pb_series.resource.labels.update(series.resource.labels)
    pb_series.metric_kind = ga_metric.MetricDescriptor.MetricKind.Value(series.metric_kind.value)

    interval = monitoring_v3.TimeInterval({"end_time": {"seconds": series.timestamp}})
    point = monitoring_v3.Point({"interval": interval, "value": {"double_value": series.value}})
    pb_series.points = [point]
    return pb_series


class CloudMonitoringSink(Sink):
    """Writes batches through the Cloud Monitoring CreateTimeSeries API.

    Credentials are resolved by the client library (application default
    credentials). The client is safe to share between targets.
    """

    def __init__(self, client: Optional[monitoring_v3.MetricServiceAsyncClient] = None):
        self.client = client or monitoring_v3.MetricServiceAsyncClient()

    async def send(self, project: str, batch: Sequence[NormalizedSeries]) -> None:
        request = {
            "name": f"projects/{project}",
            "time_series": [to_pb_time_series(series) for series in batch],
        }
        try:
            await self.client.create_time_series(request=request)
        except google_exceptions.GoogleAPICallError as e:
            raise DispatchError(f"CreateTimeSeries for project {project} failed: {str(e)}") from e


class LogSink(Sink):
    """Logs batches instead of sending them, for dry runs"""

    async def send(self, project: str, batch: Sequence[NormalizedSeries]) -> None:
        logger.info(
            "Dry run batch",
            project=project,
            series=len(batch),
            metric_types=sorted({series.metric_type for series in batch}),
        )
        for series in batch:
            logger.debug(
                "Dry run series",
                metric_type=series.metric_type,
                labels=series.labels,
                value=series.value,
            )
