"""Unit tests for threshold evaluation."""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import pytest
from shrinkctl.core.config import ShrinkConfig
from shrinkctl.core.thresholds import Decision, evaluate
from shrinkctl.models.disk import DiskTask

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


class TestEvaluate:
    """Tests for evaluate function."""

    def test_non_disk_is_skipped(self, make_task: Callable[..., DiskTask]) -> None:
        """Files without a disk extension are skipped."""
        task = make_task(name="notes.txt")

        assert evaluate(task, ShrinkConfig(), now=NOW) is Decision.SKIP

    def test_skip_overrides_deletion(self, make_task: Callable[..., DiskTask]) -> None:
        """Format check runs before the age check."""
        task = make_task(name="old.txt", last_used=NOW - timedelta(days=1000))
        config = ShrinkConfig(delete_older_than_days=30)

        assert evaluate(task, config, now=NOW) is Decision.SKIP

    @pytest.mark.parametrize("name", ["a.vhd", "a.vhdx", "A.VHDX"])
    def test_disk_extensions_proceed(
        self, make_task: Callable[..., DiskTask], name: str
    ) -> None:
        """Both disk formats proceed, whatever the case."""
        assert evaluate(make_task(name=name), ShrinkConfig(), now=NOW) is Decision.PROCEED

    def test_stale_disk_deleted(self, make_task: Callable[..., DiskTask]) -> None:
        """Disks unused for longer than the window are deleted."""
        task = make_task(last_used=NOW - timedelta(days=91))
        config = ShrinkConfig(delete_older_than_days=90)

        assert evaluate(task, config, now=NOW) is Decision.DELETE

    def test_recent_disk_not_deleted(self, make_task: Callable[..., DiskTask]) -> None:
        """Disks used within the window proceed."""
        task = make_task(last_used=NOW - timedelta(days=89))
        config = ShrinkConfig(delete_older_than_days=90)

        assert evaluate(task, config, now=NOW) is Decision.PROCEED

    def test_recent_write_prevents_deletion(
        self, make_task: Callable[..., DiskTask]
    ) -> None:
        """An old access time alone does not make a disk stale."""
        base = make_task()
        task = DiskTask(
            path=base.path,
            length=base.length,
            last_access=NOW - timedelta(days=500),
            last_write=NOW - timedelta(days=1),
            extension=".vhdx",
        )
        config = ShrinkConfig(delete_older_than_days=90)

        assert evaluate(task, config, now=NOW) is Decision.PROCEED

    def test_deletion_disabled_by_default(self, make_task: Callable[..., DiskTask]) -> None:
        """Age is ignored when deletion is not configured."""
        task = make_task(last_used=NOW - timedelta(days=5000))

        assert evaluate(task, ShrinkConfig(), now=NOW) is Decision.PROCEED

    def test_small_disk_ignored(self, make_task: Callable[..., DiskTask]) -> None:
        """Disks below the size threshold are ignored."""
        task = make_task(size_gb=4.99)
        config = ShrinkConfig(ignore_less_than_gb=5)

        assert evaluate(task, config, now=NOW) is Decision.IGNORE

    def test_disk_at_threshold_proceeds(self, make_task: Callable[..., DiskTask]) -> None:
        """The size threshold is strict."""
        task = make_task(size_gb=5)
        config = ShrinkConfig(ignore_less_than_gb=5)

        assert evaluate(task, config, now=NOW) is Decision.PROCEED

    def test_deletion_beats_ignore(self, make_task: Callable[..., DiskTask]) -> None:
        """A small stale disk is deleted rather than ignored."""
        task = make_task(size_gb=1, last_used=NOW - timedelta(days=200))
        config = ShrinkConfig(delete_older_than_days=90, ignore_less_than_gb=5)

        assert evaluate(task, config, now=NOW) is Decision.DELETE

    def test_defaults_to_current_time(self, make_task: Callable[..., DiskTask]) -> None:
        """Without now, the current time is used."""
        task = make_task(last_used=datetime.now(UTC) - timedelta(days=10))
        config = ShrinkConfig(delete_older_than_days=5)

        assert evaluate(task, config) is Decision.DELETE
