"""Unit tests for batch enrichment."""

import pytest
from dnfctl.core.enrich import enrich_packages, lookup_record
from dnfctl.core.pool import ChunkedWorkerPool
from dnfctl.core.progress import ProgressTracker
from dnfctl.query.base import LookupFailure


@pytest.fixture
def pool() -> ChunkedWorkerPool:
    """Small pool with several chunks."""
    return ChunkedWorkerPool(chunk_size=2, max_concurrency=3)


class TestLookupRecord:
    """Tests for lookup_record()."""

    def test_fills_repository(self, fake_adapter, make_record) -> None:
        """The repository lookup is merged into the record."""
        adapter = fake_adapter(
            packages=[make_record("vim", repository="")],
            repos={"vim": "updates"},
        )

        record = lookup_record(adapter, "vim")

        assert record.repository == "updates"
        assert record.evr == "1.0-1.fc41"

    def test_unknown_repository_is_empty(self, fake_adapter, make_record) -> None:
        """An unresolved repository leaves the field empty."""
        adapter = fake_adapter(packages=[make_record("vim")])

        record = lookup_record(adapter, "vim")

        assert record.repository == ""
        assert not record.has_repository

    def test_repository_failure_is_tolerated(self, fake_adapter, make_record) -> None:
        """A failing repository lookup degrades instead of skipping."""

        class FlakyRepoAdapter(fake_adapter):
            def repository(self, name):
                raise LookupFailure("dnf timed out")

        adapter = FlakyRepoAdapter(packages=[make_record("vim")])

        assert lookup_record(adapter, "vim").repository == ""

    def test_not_installed_raises(self, fake_adapter) -> None:
        """A package that vanished raises LookupFailure."""
        with pytest.raises(LookupFailure, match="not installed"):
            lookup_record(fake_adapter(), "ghost")


class TestEnrichPackages:
    """Tests for enrich_packages()."""

    def test_records_in_input_order(self, fake_adapter, make_record, pool) -> None:
        """Records come back in the order of the names."""
        names = ["zsh", "bash", "vim", "gcc", "htop"]
        adapter = fake_adapter(
            packages=[make_record(n) for n in names],
            delays={"zsh": 0.02, "bash": 0.01},
        )

        result = enrich_packages(names, adapter, pool)

        assert [r.name for r in result.records] == names
        assert result.skipped == ()

    def test_skips_missing_and_failing(self, fake_adapter, make_record, pool) -> None:
        """Uninstalled or failing packages are skipped, the rest enriched."""
        adapter = fake_adapter(
            packages=[make_record("a"), make_record("c"), make_record("d")],
            failing=["d"],
        )

        result = enrich_packages(["a", "b", "c", "d"], adapter, pool)

        assert [r.name for r in result.records] == ["a", "c"]
        assert [s.item for s in result.skipped] == ["b", "d"]

    def test_degraded_records(self, fake_adapter, make_record, pool) -> None:
        """Records without a repository are reported as degraded."""
        adapter = fake_adapter(
            packages=[make_record("a", repository=""), make_record("b", repository="")],
            repos={"a": "fedora"},
        )

        result = enrich_packages(["a", "b"], adapter, pool)

        assert [r.name for r in result.degraded] == ["b"]

    def test_each_name_queried_once(self, fake_adapter, make_record, pool) -> None:
        """Every name is looked up exactly once."""
        names = [f"p{i}" for i in range(9)]
        adapter = fake_adapter(packages=[make_record(n) for n in names])
        tracker = ProgressTracker(len(names), render=lambda _: None)

        enrich_packages(names, adapter, pool, progress=tracker)

        assert sorted(adapter.metadata_calls) == sorted(names)
        assert tracker.snapshot() == (9, 9)

    def test_empty(self, fake_adapter, pool) -> None:
        """No names produce an empty result."""
        result = enrich_packages([], fake_adapter(), pool)
        assert result.records == ()
        assert result.skipped == ()
