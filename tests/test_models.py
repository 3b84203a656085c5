"""
Tests for domain models — trace regions, content, output configurations.
"""

import pytest
from pydantic import TypeAdapter, ValidationError

from gensync.core.models import (
    DEFAULT_OUTPUT,
    Content,
    GeneratedArtifact,
    LocationData,
    OutputConfiguration,
    OutputConfigurations,
    PlainText,
    SyncResult,
    TracedText,
    TraceRegion,
    as_content,
)


def _tree() -> TraceRegion:
    return TraceRegion(
        start_line=1,
        end_line=10,
        locations=[LocationData(source_uri="src://a.dsl", start_line=1, end_line=4)],
        children=[
            TraceRegion(
                start_line=2,
                end_line=3,
                locations=[LocationData(source_uri="src://b.dsl", start_line=7, end_line=7)],
                children=[
                    TraceRegion(
                        start_line=3,
                        end_line=3,
                        locations=[LocationData(source_uri="src://a.dsl", start_line=2, end_line=2)],
                    ),
                ],
            ),
            TraceRegion(start_line=5, end_line=6),
        ],
    )


class TestTraceRegion:
    def test_walk_is_depth_first_preorder(self):
        order = [(r.start_line, r.end_line) for r in _tree().walk()]
        assert order == [(1, 10), (2, 3), (3, 3), (5, 6)]

    def test_node_count(self):
        assert _tree().node_count() == 4
        assert TraceRegion().node_count() == 1

    def test_source_uris_deduped_in_first_seen_order(self):
        assert _tree().source_uris() == ["src://a.dsl", "src://b.dsl"]

    def test_source_uris_ignore_missing_uri(self):
        region = TraceRegion(locations=[LocationData(source_uri=None)])
        assert region.source_uris() == []

    def test_primary_location_skips_uriless(self):
        region = TraceRegion(locations=[
            LocationData(source_uri=None),
            LocationData(source_uri="src://x.dsl", start_line=4, end_line=4),
        ])
        assert region.primary_location().source_uri == "src://x.dsl"

    def test_rejects_inverted_span(self):
        with pytest.raises(ValidationError):
            TraceRegion(start_line=5, end_line=2)

    def test_location_rejects_inverted_span(self):
        with pytest.raises(ValidationError):
            LocationData(source_uri="src://x", start_line=3, end_line=1)

    def test_lines_are_one_based(self):
        with pytest.raises(ValidationError):
            LocationData(start_line=0)


class TestContent:
    def test_as_content_wraps_str(self):
        content = as_content("hello")
        assert isinstance(content, PlainText)
        assert content.kind == "plain"
        assert content.trace_region is None

    def test_as_content_passes_tagged_through(self):
        traced = TracedText(text="x", trace_region=TraceRegion())
        assert as_content(traced) is traced

    def test_discriminated_union(self):
        adapter = TypeAdapter(Content)
        plain = adapter.validate_python({"kind": "plain", "text": "a"})
        traced = adapter.validate_python({"kind": "traced", "text": "b", "trace_region": {}})
        assert isinstance(plain, PlainText)
        assert isinstance(traced, TracedText)
        assert traced.trace_region == TraceRegion()

    def test_artifact_defaults_to_default_output(self):
        artifact = GeneratedArtifact(file_name="A.java", contents=PlainText(text="x"))
        assert artifact.output_name == DEFAULT_OUTPUT

    def test_artifact_wraps_bare_text(self):
        artifact = GeneratedArtifact(file_name="B.txt", output_name="default", contents="hello\n")
        assert artifact.contents == PlainText(text="hello\n")
        assert artifact.contents.trace_region is None

    def test_artifact_keeps_traced_content(self):
        traced = TracedText(text="x", trace_region=TraceRegion())
        artifact = GeneratedArtifact(file_name="A.java", contents=traced)
        assert artifact.contents.kind == "traced"
        assert artifact.contents.trace_region == TraceRegion()

    def test_sync_result_written(self):
        assert SyncResult(action="created").written
        assert SyncResult(action="updated").written
        assert not SyncResult(action="unchanged").written
        assert not SyncResult(action="skipped").written


class TestOutputConfigurations:
    def test_defaults(self):
        config = OutputConfiguration()
        assert config.name == DEFAULT_OUTPUT
        assert config.output_directory == "src-gen"
        assert config.create_output_directory
        assert config.override_existing_resources
        assert config.set_derived_property

    def test_lookup(self):
        table = OutputConfigurations([OutputConfiguration(name="a"), OutputConfiguration(name="b")])
        assert table.get("b").name == "b"
        assert "a" in table
        assert len(table) == 2
        assert table.names() == ["a", "b"]

    def test_unknown_name(self):
        with pytest.raises(KeyError, match="nope"):
            OutputConfigurations.with_defaults().get("nope")

    def test_duplicate_names_rejected(self):
        with pytest.raises(ValueError):
            OutputConfigurations([OutputConfiguration(name="a"), OutputConfiguration(name="a")])

    def test_configuration_is_immutable(self):
        config = OutputConfiguration()
        with pytest.raises(ValidationError):
            config.output_directory = "elsewhere"
