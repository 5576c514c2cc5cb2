"""Tests for value coercion and instance encoding."""

from __future__ import annotations

import datetime
import math

import pytest

from deepint_source_mongo.codec import (
    EPOCH,
    NOMINAL_MAX_LENGTH,
    coerce,
    decode_document,
    encode_document,
    encode_instance,
    sanitize_instances,
    stringify,
)
from deepint_source_mongo.features import FeatureType

UTC = datetime.timezone.utc


class TestStringify:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            (None, "null"),
            ("abc", "abc"),
            (True, "true"),
            (False, "false"),
            (3, "3"),
            (3.0, "3"),
            (5.1, "5.1"),
            (-0.5, "-0.5"),
            (math.inf, "Infinity"),
            (math.nan, "NaN"),
            ([1, None, "x"], "1,,x"),
            ({"a": 1}, '{"a":1}'),
        ],
    )
    def test_scalars_and_containers(self, raw, expected) -> None:
        assert stringify(raw) == expected

    def test_datetime(self) -> None:
        value = datetime.datetime(2021, 3, 4, 5, 6, 7, 890000, tzinfo=UTC)
        assert stringify(value) == "2021-03-04T05:06:07.890Z"

    def test_nesting_too_deep_is_empty(self) -> None:
        nested_list: list = []
        nested_mapping: dict = {}
        for _ in range(3000):
            nested_list = [nested_list]
            nested_mapping = {"x": nested_mapping}

        assert stringify(nested_list) == ""
        assert stringify(nested_mapping) == ""


class TestCoerce:
    @pytest.mark.parametrize("kind", list(FeatureType))
    def test_none_is_none_for_every_type(self, kind) -> None:
        assert coerce(None, kind) is None

    def test_nominal_truncates(self) -> None:
        assert coerce("x" * 300, FeatureType.NOMINAL) == "x" * NOMINAL_MAX_LENGTH
        assert coerce(12, "nominal") == "12"

    def test_text_does_not_truncate(self) -> None:
        assert coerce("x" * 300, FeatureType.TEXT) == "x" * 300
        assert coerce(True, FeatureType.TEXT) == "true"

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("abc", None),
            ("", None),
            ("1_000", None),
            ("inf", None),
            ("42", 42),
            (" 4.5 ", 4.5),
            ("1e3", 1000.0),
            (7, 7),
            (5.1, 5.1),
            (True, 1),
            ([1], None),
        ],
    )
    def test_numeric(self, raw, expected) -> None:
        assert coerce(raw, FeatureType.NUMERIC) == expected

    def test_numeric_nan_is_none(self) -> None:
        assert coerce(math.nan, FeatureType.NUMERIC) is None

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("true", True),
            ("1", True),
            ("false", False),
            ("0", False),
            ("", False),
            ("no", True),
            (0, False),
            (2, True),
            ([], True),
            ({}, True),
        ],
    )
    def test_logic(self, raw, expected) -> None:
        assert coerce(raw, FeatureType.LOGIC) is expected

    def test_date_parses_iso_strings(self) -> None:
        assert coerce("2020-01-02T03:04:05Z", FeatureType.DATE) == datetime.datetime(
            2020, 1, 2, 3, 4, 5, tzinfo=UTC
        )

    def test_date_from_epoch_milliseconds(self) -> None:
        assert coerce(86_400_000, FeatureType.DATE) == datetime.datetime(
            1970, 1, 2, tzinfo=UTC
        )

    def test_naive_datetime_is_taken_as_utc(self) -> None:
        naive = datetime.datetime(2020, 5, 6, 7, 8, 9)
        assert coerce(naive, FeatureType.DATE) == naive.replace(tzinfo=UTC)

    @pytest.mark.parametrize("raw", ["not a date", "", [1, 2], {"a": 1}, 1e300])
    def test_date_failure_is_epoch(self, raw) -> None:
        assert coerce(raw, FeatureType.DATE) == EPOCH

    @pytest.mark.parametrize(
        "raw", [object(), b"\xff", [None], {"x": [1, {"y": None}]}, -math.inf]
    )
    @pytest.mark.parametrize("kind", list(FeatureType))
    def test_total(self, raw, kind) -> None:
        coerce(raw, kind)


class TestDocuments:
    def test_decode_document_is_aligned_to_features(self, iris_schema) -> None:
        doc = {"_id": "x", "species": "setosa", "sepalLength": "5.1"}
        assert decode_document(doc, iris_schema) == [5.1, "setosa"]

    def test_decode_missing_fields(self, iris_schema) -> None:
        assert decode_document({}, iris_schema) == [None, None]

    def test_encode_document(self, iris_schema) -> None:
        assert encode_document([5.1, "setosa"], iris_schema) == {
            "sepalLength": 5.1,
            "species": "setosa",
        }
        assert encode_document([5.1], iris_schema) == {
            "sepalLength": 5.1,
            "species": None,
        }

    def test_sanitize_instances(self, iris_schema) -> None:
        raw = [{"sepalLength": 5.1, "species": "setosa"}, "garbage", None]
        assert sanitize_instances(raw, iris_schema) == [
            [5.1, "setosa"],
            [None, None],
            [None, None],
        ]

    @pytest.mark.parametrize("raw", [None, "rows", {"sepalLength": 1}])
    def test_sanitize_instances_requires_a_list(self, iris_schema, raw) -> None:
        assert sanitize_instances(raw, iris_schema) == []

    def test_encode_instance_renders_dates(self) -> None:
        when = datetime.datetime(2020, 1, 1, tzinfo=UTC)
        assert encode_instance([1, "a", True, None, when]) == [
            1,
            "a",
            True,
            None,
            "2020-01-01T00:00:00.000Z",
        ]
