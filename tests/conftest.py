import re
from typing import List, Sequence

import pytest

from tsforward.models.config import MATCH_ALL, TargetConfig
from tsforward.models.metrics import NormalizedSeries, Resource
from tsforward.services.sink import Sink


class RecordingSink(Sink):
    def __init__(self, fail_on: Sequence[int] = ()):
        self.batches: List[List[NormalizedSeries]] = []
        self.projects: List[str] = []
        self.fail_on = set(fail_on)
        self.calls = 0

    async def send(self, project, batch):
        index = self.calls
        self.calls += 1
        if index in self.fail_on:
            raise RuntimeError(f"batch {index} rejected")
        self.projects.append(project)
        self.batches.append(list(batch))


@pytest.fixture
def make_target():
    def _make(
        prefix=(),
        labels=None,
        pattern=MATCH_ALL,
        interval=60.0,
        url="http://exporter:9100/metrics",
    ) -> TargetConfig:
        return TargetConfig(
            source_url=url,
            resource=Resource(type="global", labels={"project_id": "demo-project"}),
            project="demo-project",
            poll_interval=interval,
            name_prefix=tuple(prefix),
            static_labels=dict(labels or {}),
            name_pattern=re.compile(pattern),
        )

    return _make


@pytest.fixture
def recording_sink():
    return RecordingSink()
