"""Tests for watch mode."""

import asyncio
import shutil
from pathlib import Path

from watchfiles import Change

from dbt_depthy.service import DepthService
from dbt_depthy.watch import is_relevant_change, watch_project

FIXTURES = Path(__file__).parent / "fixtures"
JAFFLE = FIXTURES / "jaffle_shop"


class TestRelevantChange:
    def test_manifest_change(self):
        assert is_relevant_change(Change.modified, "/p/target/manifest.json")

    def test_project_file_added(self):
        assert is_relevant_change(Change.added, "/p/dbt_project.yml")

    def test_other_files_ignored(self):
        assert not is_relevant_change(Change.modified, "/p/models/fct_orders.sql")
        assert not is_relevant_change(Change.modified, "/p/target/run_results.json")

    def test_deletion_ignored(self):
        assert not is_relevant_change(Change.deleted, "/p/target/manifest.json")


class TestWatchProject:
    def test_refreshes_on_each_change(self, tmp_path, monkeypatch):
        root = tmp_path / "shop"
        shutil.copytree(JAFFLE, root)
        seen_kwargs = {}

        async def fake_awatch(path, **kwargs):
            seen_kwargs.update(kwargs, path=path)
            yield {(Change.modified, str(root / "target" / "manifest.json"))}
            yield {(Change.added, str(root / "dbt_project.yml"))}

        monkeypatch.setattr("dbt_depthy.watch.awatch", fake_awatch)

        service = DepthService(root)
        results = []
        asyncio.run(watch_project(service, on_refresh=results.append))

        assert results == [True, True, True]
        assert seen_kwargs["path"] == root
        assert seen_kwargs["watch_filter"] is is_relevant_change
        assert service.get_depth("fct_orders") == 4

    def test_reports_failed_refresh(self, tmp_path, monkeypatch):
        async def fake_awatch(path, **kwargs):
            return
            yield

        monkeypatch.setattr("dbt_depthy.watch.awatch", fake_awatch)

        service = DepthService(tmp_path)
        results = []
        asyncio.run(watch_project(service, on_refresh=results.append))
        assert results == [False]
