"""Tests for the feature schema and projection sanitizing."""

from __future__ import annotations

import pytest

from deepint_source_mongo.features import Feature, FeatureSchema, FeatureType


class TestFeatureType:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("nominal", FeatureType.NOMINAL),
            ("NUMERIC", FeatureType.NUMERIC),
            (" logic ", FeatureType.LOGIC),
            ("date", FeatureType.DATE),
            ("text", FeatureType.TEXT),
            ("bogus", FeatureType.TEXT),
            ("", FeatureType.TEXT),
            (None, FeatureType.TEXT),
            (FeatureType.DATE, FeatureType.DATE),
        ],
    )
    def test_parse(self, raw, expected) -> None:
        assert FeatureType.parse(raw) is expected


class TestFeatureSchema:
    def test_from_names_defaults_missing_types_to_text(self) -> None:
        schema = FeatureSchema.from_names(["a", "b", "c"], ["numeric", "bogus"])

        assert [f.type for f in schema] == [
            FeatureType.NUMERIC,
            FeatureType.TEXT,
            FeatureType.TEXT,
        ]
        assert [f.index for f in schema] == [0, 1, 2]
        assert schema.names == ["a", "b", "c"]

    def test_get(self, iris_schema) -> None:
        assert iris_schema.get(1) == Feature(1, "species", FeatureType.NOMINAL)
        assert iris_schema.get(-1) is None
        assert iris_schema.get(2) is None
        assert iris_schema.get(True) is None
        assert iris_schema.get(1.0) is None
        assert iris_schema.get("1") is None

    def test_sequence_protocol(self, iris_schema) -> None:
        assert len(iris_schema) == 2
        assert iris_schema[0].name == "sepalLength"
        assert [f.name for f in iris_schema] == ["sepalLength", "species"]

    def test_to_list(self, iris_schema) -> None:
        assert iris_schema.to_list() == [
            {"index": 0, "name": "sepalLength", "type": "numeric"},
            {"index": 1, "name": "species", "type": "nominal"},
        ]


class TestSanitizeProjection:
    def test_csv_string(self, schema) -> None:
        assert schema.sanitize_projection("0, 2,x,-1,9,1abc") == [0, 2, 1]

    def test_sequence(self, schema) -> None:
        assert schema.sanitize_projection([4, "2", 1.7, None, True]) == [4, 2, 1]

    @pytest.mark.parametrize("raw", ["", None, [], 7, {"a": 1}])
    def test_empty_or_unsupported(self, schema, raw) -> None:
        assert schema.sanitize_projection(raw) == []

    def test_project_skips_invalid_indices(self, schema) -> None:
        assert [f.name for f in schema.project([2, 7, 0])] == ["weight", "name"]
