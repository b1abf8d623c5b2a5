"""Tests for the request-scoped mapping consumer."""

from __future__ import annotations

import logging
from unittest.mock import patch

import pytest

import sourcetrace.resolver.consumer as consumer_mod
from sourcetrace.errors import MalformedMapError
from sourcetrace.resolver.consumer import (
    MappingConsumer,
    initialize_consumer,
    open_consumer,
)
from sourcetrace.resolver.schemas import MappedPosition, NoMapping
from tests.conftest import ROOT, make_map

SOURCE = f"route-module:{ROOT}/app/routes/a.ts"


class TestOriginalPositionFor:
    def test_exact_segment(self) -> None:
        with open_consumer(make_map()) as consumer:
            position = consumer.original_position_for(1, 0)
        assert position == MappedPosition(source=SOURCE, line=3, column=2)

    def test_second_segment_uses_relative_offsets(self) -> None:
        with open_consumer(make_map()) as consumer:
            position = consumer.original_position_for(1, 4)
        assert position == MappedPosition(source=SOURCE, line=3, column=6)

    def test_line_past_mappings_is_no_mapping(self) -> None:
        with open_consumer(make_map()) as consumer:
            position = consumer.original_position_for(40, 0)
        assert isinstance(position, NoMapping)
        assert (position.line, position.column) == (40, 0)

    def test_zero_line_is_no_mapping(self) -> None:
        with open_consumer(make_map()) as consumer:
            assert isinstance(
                consumer.original_position_for(0, 0), NoMapping
            )

    def test_second_generated_line(self) -> None:
        raw = make_map(mappings=";AAEE")
        with open_consumer(raw) as consumer:
            position = consumer.original_position_for(2, 0)
        assert isinstance(position, MappedPosition)
        assert (position.line, position.column) == (3, 2)


class TestSourceContentFor:
    def test_embedded_content(self) -> None:
        raw = make_map(sources_content=["export const a = 1;"])
        with open_consumer(raw) as consumer:
            assert (
                consumer.source_content_for(SOURCE)
                == "export const a = 1;"
            )

    def test_missing_sources_content_is_none(self) -> None:
        with open_consumer(make_map()) as consumer:
            assert consumer.source_content_for(SOURCE) is None

    def test_null_entry_is_none(self) -> None:
        raw = make_map(sources_content=[None])
        with open_consumer(raw) as consumer:
            assert consumer.source_content_for(SOURCE) is None

    def test_unknown_source_is_none(self) -> None:
        raw = make_map(sources_content=["x"])
        with open_consumer(raw) as consumer:
            assert consumer.source_content_for("other.ts") is None

    def test_source_root_prefixed_name(self) -> None:
        raw = make_map(
            sources=["a.ts"],
            sources_content=["body"],
            sourceRoot="/src/",
        )
        with open_consumer(raw) as consumer:
            assert consumer.source_content_for("/src/a.ts") == "body"


class TestSessionLifecycle:
    def test_released_on_success(self) -> None:
        with open_consumer(make_map()) as consumer:
            pass
        assert consumer.closed

    def test_released_when_query_fails(self) -> None:
        with pytest.raises(RuntimeError, match="boom"):
            with open_consumer(make_map()) as consumer:
                raise RuntimeError("boom")
        assert consumer.closed

    def test_closed_consumer_rejects_queries(self) -> None:
        consumer = MappingConsumer(make_map())
        consumer.close()
        with pytest.raises(RuntimeError, match="closed"):
            consumer.original_position_for(1, 0)
        with pytest.raises(RuntimeError, match="closed"):
            consumer.source_content_for(SOURCE)

    def test_missing_mappings_is_malformed(self) -> None:
        raw = make_map()
        del raw["mappings"]
        with pytest.raises(MalformedMapError):
            MappingConsumer(raw)

    def test_names_may_be_omitted(self) -> None:
        raw = make_map()
        del raw["names"]
        with open_consumer(raw) as consumer:
            assert isinstance(
                consumer.original_position_for(1, 0), MappedPosition
            )


def indexed_map(*sections: tuple[int, int, dict]) -> dict:
    return {
        "version": 3,
        "sections": [
            {"offset": {"line": line, "column": column}, "map": raw}
            for line, column, raw in sections
        ],
    }


class TestIndexedMap:
    def test_single_section(self) -> None:
        raw = indexed_map((0, 0, make_map(sources_content=["A"])))
        with open_consumer(raw) as consumer:
            position = consumer.original_position_for(1, 4)
            assert position == MappedPosition(
                source=SOURCE, line=3, column=6
            )
            assert consumer.source_content_for(SOURCE) == "A"

    def test_query_routed_by_line_offset(self) -> None:
        raw = indexed_map(
            (0, 0, make_map(sources_content=["A"])),
            (10, 0, make_map(sources=["b.ts"], sources_content=["B"])),
        )
        with open_consumer(raw) as consumer:
            position = consumer.original_position_for(11, 4)
            assert position == MappedPosition(
                source="b.ts", line=3, column=6
            )
            assert consumer.source_content_for("b.ts") == "B"

    def test_column_offset_applies_on_first_line(self) -> None:
        raw = indexed_map(
            (0, 100, make_map(sources=["b.ts"])),
        )
        with open_consumer(raw) as consumer:
            assert consumer.original_position_for(1, 104) == (
                MappedPosition(source="b.ts", line=3, column=6)
            )
            assert isinstance(
                consumer.original_position_for(1, 4), NoMapping
            )

    def test_url_section_is_malformed(self) -> None:
        raw = {
            "version": 3,
            "sections": [
                {"offset": {"line": 0, "column": 0}, "url": "a.js.map"}
            ],
        }
        with pytest.raises(MalformedMapError, match="url sections"):
            MappingConsumer(raw)

    def test_missing_offset_is_malformed(self) -> None:
        raw = {"version": 3, "sections": [{"map": make_map()}]}
        with pytest.raises(MalformedMapError):
            MappingConsumer(raw)


class TestInitializeConsumer:
    @pytest.fixture(autouse=True)
    def _reset_flag(self):
        consumer_mod._initialized = False
        yield
        consumer_mod._initialized = False

    def test_is_idempotent(self) -> None:
        with patch(
            "sourcetrace.resolver.consumer.version",
            return_value="0.2.1",
        ) as mock_version:
            initialize_consumer()
            initialize_consumer()
        mock_version.assert_called_once()

    def test_logs_backend(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(
            logging.INFO, logger="sourcetrace.resolver.consumer"
        ):
            initialize_consumer()
        assert "event=consumer_initialized" in caplog.text
