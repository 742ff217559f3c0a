from typing import Sequence

import structlog

from tsforward.models.metrics import NormalizedSeries
from tsforward.services.sink import Sink
from tsforward.utils.utils import chunked

logger = structlog.get_logger(__name__)

# CreateTimeSeries rejects requests with more than 200 series
CHUNK_SIZE = 200


class Dispatcher:
    def __init__(self, sink: Sink, chunk_size: int = CHUNK_SIZE):
        self.sink = sink
        self.chunk_size = chunk_size

    async def dispatch(self, project: str, series: Sequence[NormalizedSeries]) -> int:
        """Send series in order, one sink call per chunk.

        A failed chunk is logged and the remaining chunks are still sent.
        Returns the number of chunks the sink accepted.
        """
        sent = 0
        for index, batch in enumerate(chunked(series, self.chunk_size)):
            try:
                await self.sink.send(project, batch)
            except Exception as e:
                logger.error(
                    "Failed to send batch",
                    project=project,
                    batch=index,
                    size=len(batch),
                    error=str(e),
                )
                continue
            sent += 1

        logger.debug("Dispatched series", project=project, series=len(series), batches=sent)
        return sent
