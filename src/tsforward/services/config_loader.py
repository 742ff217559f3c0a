import re
from typing import List

import structlog
from pydantic import TypeAdapter, ValidationError

from tsforward.errors import ConfigError
from tsforward.models.config import MATCH_ALL, TargetConfig, TargetSpec
from tsforward.models.metrics import Resource
from tsforward.utils.time import parse_duration

logger = structlog.get_logger(__name__)

PROJECT_LABEL = "project_id"

_targets_adapter = TypeAdapter(List[TargetSpec])


def _positive_duration(text: str, field: str, target: str) -> float:
    try:
        seconds = parse_duration(text)
    except ValueError as e:
        raise ConfigError(f"target {target}: {field}: {str(e)}") from e
    if seconds <= 0:
        raise ConfigError(f"target {target}: {field} must be positive, got {text!r}")
    return seconds


def build_target(spec: TargetSpec) -> TargetConfig:
    project = spec.resource.labels.get(PROJECT_LABEL)
    if not project:
        raise ConfigError(
            f"target {spec.target}: resource label {PROJECT_LABEL!r} is required"
        )

    try:
        pattern = re.compile(spec.metric.filter or MATCH_ALL)
    except re.error as e:
        raise ConfigError(
            f"target {spec.target}: invalid filter {spec.metric.filter!r}: {str(e)}"
        ) from e

    return TargetConfig(
        source_url=spec.target,
        resource=Resource(type=spec.resource.type, labels=dict(spec.resource.labels)),
        project=project,
        poll_interval=_positive_duration(spec.interval, "interval", spec.target),
        name_prefix=tuple(spec.metric.prefix),
        static_labels=dict(spec.metric.labels),
        name_pattern=pattern,
        timeout=_positive_duration(spec.timeout, "timeout", spec.target),
    )


def parse_targets(raw: str) -> List[TargetConfig]:
    """Validate a JSON array of targets; any invalid entry rejects the whole config"""
    try:
        specs = _targets_adapter.validate_json(raw)
    except ValidationError as e:
        raise ConfigError(f"invalid config: {str(e)}") from e
    return [build_target(spec) for spec in specs]


def load_targets(path: str) -> List[TargetConfig]:
    try:
        with open(path, "r") as f:
            raw = f.read()
    except OSError as e:
        logger.error(f"Failed to read config from {path}: {str(e)}")
        raise ConfigError(f"cannot read config {path}: {str(e)}") from e

    targets = parse_targets(raw)
    logger.info(f"Loaded {len(targets)} target(s) from {path}")
    return targets
