"""Tests for fetching and decoding the text exposition format."""

import math

import httpx
import pytest

from tsforward.errors import ErrorKind, FetchError
from tsforward.models.metrics import Histogram, Scalar, Summary
from tsforward.services.fetcher import fetch_metric_families, parse_metric_families

EXPOSITION = """\
# HELP http_requests_total Total requests.
# TYPE http_requests_total counter
http_requests_total{method="GET"} 42
http_requests_total{method="POST"} 7
# HELP temperature Current temperature.
# TYPE temperature gauge
temperature{room="a"} 21.5
# TYPE latency summary
latency{quantile="0.5"} 0.2
latency{quantile="0.9"} 0.7
latency_sum 10
latency_count 5
# TYPE request_duration_seconds histogram
request_duration_seconds_bucket{path="/",le="0.1"} 1
request_duration_seconds_bucket{path="/",le="1"} 4
request_duration_seconds_bucket{path="/",le="+Inf"} 7
request_duration_seconds_sum{path="/"} 3.2
request_duration_seconds_count{path="/"} 7
request_duration_seconds_bucket{path="/a",le="0.1"} 0
request_duration_seconds_bucket{path="/a",le="1"} 0
request_duration_seconds_bucket{path="/a",le="+Inf"} 2
request_duration_seconds_sum{path="/a"} 5
request_duration_seconds_count{path="/a"} 2
"""


class TestParseMetricFamilies:
    def test_counter_keeps_declared_name(self):
        families = parse_metric_families(EXPOSITION)

        family = families["http_requests_total"]
        assert family.type == "counter"
        assert [(m.labels, m.payload) for m in family.metrics] == [
            ({"method": "GET"}, Scalar(42.0)),
            ({"method": "POST"}, Scalar(7.0)),
        ]

    def test_counter_without_total_suffix(self):
        families = parse_metric_families("# TYPE jobs counter\njobs 3\n")

        assert list(families) == ["jobs"]
        assert families["jobs"].metrics[0].payload == Scalar(3.0)

    def test_gauge(self):
        family = parse_metric_families(EXPOSITION)["temperature"]

        assert family.type == "gauge"
        assert family.metrics[0].labels == {"room": "a"}
        assert family.metrics[0].payload == Scalar(21.5)

    def test_summary_groups_quantiles(self):
        family = parse_metric_families(EXPOSITION)["latency"]

        assert family.type == "summary"
        assert len(family.metrics) == 1
        summary = family.metrics[0].payload
        assert isinstance(summary, Summary)
        assert summary.sample_sum == 10.0
        assert summary.sample_count == 5.0
        assert [(q.quantile, q.value) for q in summary.quantiles] == [(0.5, 0.2), (0.9, 0.7)]
        assert family.metrics[0].labels == {}

    def test_histogram_groups_by_labels(self):
        family = parse_metric_families(EXPOSITION)["request_duration_seconds"]

        assert family.type == "histogram"
        assert [m.labels for m in family.metrics] == [{"path": "/"}, {"path": "/a"}]
        first = family.metrics[0].payload
        assert isinstance(first, Histogram)
        assert first.sample_sum == 3.2
        assert first.sample_count == 7.0
        assert [b.cumulative_count for b in first.buckets] == [1.0, 4.0, 7.0]
        assert first.buckets[0].upper_bound == 0.1
        assert math.isinf(first.buckets[2].upper_bound)

    def test_untyped_lines_merge_into_one_family(self):
        families = parse_metric_families('queue_depth{q="a"} 1\nqueue_depth{q="b"} 2\n')

        family = families["queue_depth"]
        assert family.type == "untyped"
        assert [m.labels for m in family.metrics] == [{"q": "a"}, {"q": "b"}]

    def test_declared_untyped(self):
        families = parse_metric_families("# TYPE legacy untyped\nlegacy 9\n")

        assert families["legacy"].type == "untyped"

    def test_preserves_exposition_order(self):
        assert list(parse_metric_families(EXPOSITION)) == [
            "http_requests_total",
            "temperature",
            "latency",
            "request_duration_seconds",
        ]

    def test_malformed_payload(self):
        with pytest.raises(FetchError):
            parse_metric_families("# TYPE temperature gauge\ntemperature warm\n")

    def test_repeated_type_declaration(self):
        with pytest.raises(FetchError) as exc_info:
            parse_metric_families("# TYPE jobs counter\njobs 1\n# TYPE jobs gauge\njobs 2\n")

        assert "jobs" in str(exc_info.value)

    def test_untyped_line_conflicting_with_declared_family(self):
        with pytest.raises(FetchError) as exc_info:
            parse_metric_families("# TYPE jobs counter\njobs 1\nother 3\njobs 2\n")

        assert "jobs" in str(exc_info.value)


def transport_returning(status_code, text=""):
    def handler(request):
        return httpx.Response(status_code, text=text)

    return httpx.MockTransport(handler)


class TestFetchMetricFamilies:
    @pytest.mark.asyncio
    async def test_success(self):
        families = await fetch_metric_families(
            "http://exporter/metrics", transport=transport_returning(200, EXPOSITION)
        )

        assert "latency" in families

    @pytest.mark.asyncio
    async def test_http_500(self):
        with pytest.raises(FetchError) as exc_info:
            await fetch_metric_families(
                "http://exporter/metrics", transport=transport_returning(500, "oops")
            )

        assert "500" in str(exc_info.value)
        assert exc_info.value.kind == ErrorKind.FETCH

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(FetchError):
            await fetch_metric_families(
                "http://exporter/metrics", transport=httpx.MockTransport(handler)
            )

    @pytest.mark.asyncio
    async def test_follows_redirects(self):
        def handler(request):
            if request.url.path == "/metrics":
                return httpx.Response(302, headers={"Location": "http://exporter/metrics/"})
            return httpx.Response(200, text="up 1\n")

        families = await fetch_metric_families(
            "http://exporter/metrics", transport=httpx.MockTransport(handler)
        )

        assert families["up"].metrics[0].payload == Scalar(1.0)
