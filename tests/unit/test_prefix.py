"""Tests for log prefixes and backend capability sets."""

import pytest

from resmon.adapters.queues import BatchQueue, create_queue
from resmon.core.prefix import artifact_suffixes, output_prefix, resolve_prefix
from resmon.models.enums import QueueFeature


class TestResolvePrefix:
    def test_example(self):
        assert resolve_prefix("/logs/resource-rule-%%", 42) == "/logs/resource-rule-42"

    def test_deterministic(self):
        template = "/logs/resource-rule-%%"
        assert resolve_prefix(template, 7) == resolve_prefix(template, 7)

    def test_every_placeholder_replaced(self):
        assert resolve_prefix("d/%%/rule-%%", 3) == "d/3/rule-3"

    def test_no_placeholder(self):
        assert resolve_prefix("/logs/fixed", 3) == "/logs/fixed"

    @pytest.mark.parametrize("node_id", [0, 1, 99, 123456])
    def test_distinct_nodes_distinct_prefixes(self, node_id):
        assert resolve_prefix("r-%%", node_id) == f"r-{node_id}"


class TestOutputPrefix:
    def test_output_directories_keeps_full_prefix(self):
        assert output_prefix("/logs/resource-rule-42", create_queue("local")) == "/logs/resource-rule-42"

    def test_flat_backend_uses_basename(self):
        assert output_prefix("/logs/resource-rule-42", create_queue("condor")) == "resource-rule-42"


class TestArtifactSuffixes:
    def test_summary_always(self):
        assert artifact_suffixes(False, False) == [".summary"]

    def test_all(self):
        assert artifact_suffixes(True, True) == [".summary", ".series", ".files"]

    def test_list_files_only(self):
        assert artifact_suffixes(False, True) == [".summary", ".files"]


class TestBatchQueue:
    def test_known_types(self):
        assert create_queue("wq").supports_feature(QueueFeature.OUTPUT_DIRECTORIES)
        assert create_queue("condor").supports_feature("remote_rename")
        assert not create_queue("condor").supports_feature("output_directories")
        assert create_queue("dryrun").features == frozenset()

    def test_unknown_type(self):
        with pytest.raises(ValueError, match="Unknown batch queue type"):
            create_queue("slurmish")

    def test_custom_features(self):
        q = BatchQueue("custom", {"remote_rename"})
        assert q.supports_feature(QueueFeature.REMOTE_RENAME)
        assert not q.supports_feature(QueueFeature.OUTPUT_DIRECTORIES)
