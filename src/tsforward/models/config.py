import re
from dataclasses import dataclass, field
from typing import Dict, List, Pattern, Tuple

from pydantic import BaseModel

from tsforward.models.metrics import Resource

MATCH_ALL = "^.+$"


class ResourceSpec(BaseModel):
    type: str
    labels: Dict[str, str] = {}


class MetricSpec(BaseModel):
    prefix: List[str] = []
    labels: Dict[str, str] = {}
    filter: str = ""


class TargetSpec(BaseModel):
    """One entry of the JSON config file, before durations and filters are parsed"""

    target: str
    resource: ResourceSpec
    metric: MetricSpec = MetricSpec()
    interval: str
    timeout: str = "10s"


@dataclass(frozen=True)
class TargetConfig:
    source_url: str
    resource: Resource
    project: str
    poll_interval: float
    name_prefix: Tuple[str, ...] = ()
    static_labels: Dict[str, str] = field(default_factory=dict)
    name_pattern: Pattern[str] = re.compile(MATCH_ALL)
    timeout: float = 10.0
