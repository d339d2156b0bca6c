"""Tests for Response and the query metrics decoder."""

import httpx
import pytest

from cosmosrest.exceptions import NoMetricsError, ParseError
from cosmosrest.response import Response, decode_metrics, expect_status_class, expect_status_code

METRICS_HEADER = (
    "totalExecutionTimeInMs=33.67;queryCompileTimeInMs=0.06;"
    "queryLogicalPlanBuildTimeInMs=0.02;queryPhysicalPlanBuildTimeInMs=0.10;"
    "queryOptimizationTimeInMs=0.00;VMExecutionTimeInMs=32.56;"
    "indexLookupTimeInMs=0.36;documentLoadTimeInMs=9.58;"
    "systemFunctionExecuteTimeInMs=0.00;userFunctionExecuteTimeInMs=0.00;"
    "retrievedDocumentCount=2000;retrievedDocumentSize=1125600;"
    "outputDocumentCount=2000;writeOutputTimeInMs=18.10;indexUtilizationRatio=1.00"
)


class TestDecodeMetrics:
    """Test metrics header decoding."""

    def test_literal_header(self):
        metrics = decode_metrics(METRICS_HEADER, "2.5")

        assert metrics.total_execution_time_in_ms == pytest.approx(33.67)
        assert metrics.query_compile_time_in_ms == pytest.approx(0.06)
        assert metrics.vm_execution_time_in_ms == pytest.approx(32.56)
        assert metrics.document_load_time_in_ms == pytest.approx(9.58)
        assert metrics.write_output_time_in_ms == pytest.approx(18.10)
        assert metrics.index_utilization_ratio == pytest.approx(1.0)
        assert metrics.retrieved_document_count == 2000
        assert metrics.retrieved_document_size == 1125600
        assert metrics.output_document_count == 2000
        assert metrics.request_charge == pytest.approx(2.5)

    def test_integer_fields_are_floored(self):
        metrics = decode_metrics("retrievedDocumentCount=12.9")
        assert metrics.retrieved_document_count == 12
        assert isinstance(metrics.retrieved_document_count, int)

    def test_empty_header(self):
        with pytest.raises(NoMetricsError) as exc_info:
            decode_metrics("")
        assert str(exc_info.value) == "no metrics in response"

    def test_unknown_keys_and_malformed_entries_are_skipped(self):
        metrics = decode_metrics("futureMetric=1.5;garbage;a=b=c;totalExecutionTimeInMs=4")
        assert metrics.total_execution_time_in_ms == 4.0

    def test_non_numeric_value(self):
        with pytest.raises(ParseError):
            decode_metrics("totalExecutionTimeInMs=fast")

    def test_non_numeric_charge(self):
        with pytest.raises(ParseError):
            decode_metrics("totalExecutionTimeInMs=1", "lots")

    def test_absent_charge_is_zero(self):
        assert decode_metrics("totalExecutionTimeInMs=1").request_charge == 0.0


class TestResponse:
    """Test response header accessors."""

    def test_tokens(self):
        response = Response(httpx.Headers({
            "x-ms-continuation": "+RID:abc#RT:1",
            "x-ms-session-token": "0:42",
        }))

        assert response.continuation() == "+RID:abc#RT:1"
        assert response.session_token() == "0:42"

    def test_missing_tokens_are_empty(self):
        response = Response({})
        assert response.continuation() == ""
        assert response.session_token() == ""

    def test_request_charge(self):
        assert Response({"x-ms-request-charge": "5.71"}).request_charge() == pytest.approx(5.71)

        with pytest.raises(ParseError):
            Response({}).request_charge()

    def test_query_metrics(self):
        response = Response({
            "x-ms-documentdb-query-metrics": "outputDocumentCount=3",
            "x-ms-request-charge": "1.25",
        })
        metrics = response.query_metrics()

        assert metrics.output_document_count == 3
        assert metrics.request_charge == 1.25

    def test_query_metrics_missing(self):
        with pytest.raises(NoMetricsError):
            Response({}).query_metrics()


class TestStatusValidators:
    """Test status code validators."""

    def test_exact(self):
        validate = expect_status_code(201)
        assert validate(201)
        assert not validate(200)

    def test_class(self):
        validate = expect_status_class(404)
        assert validate(400)
        assert validate(499)
        assert not validate(500)
