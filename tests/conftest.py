"""Shared fixtures for conntrack agent tests."""

import os
import sys
import logging
from pathlib import Path
from typing import List

import pytest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from conntrack_agent.core.accumulator import MetricsAccumulator
from conntrack_agent.core.config import AgentConfig
from conntrack_agent.collectors.platform import ConntrackStat, ConntrackStatsProvider


class FakeStatsProvider(ConntrackStatsProvider):
    """Provider returning canned stats and recording every call."""

    def __init__(self, stats=None, error=None):
        self.stats = list(stats or [])
        self.error = error
        self.calls = []

    def net_conntrack(self, per_cpu: bool) -> List[ConntrackStat]:
        self.calls.append(per_cpu)
        if self.error is not None:
            raise self.error
        return list(self.stats)


def make_stat(**overrides) -> ConntrackStat:
    values = dict(
        entries=1234, searched=10, found=1, new=5, invalid=43, ignore=13,
        delete=3, delete_list=5, insert=9, insert_failed=20, drop=49,
        early_drop=7, icmp_error=21, expect_new=12, expect_create=44,
        expect_delete=53, search_restart=31,
    )
    values.update(overrides)
    return ConntrackStat(**values)


@pytest.fixture
def make_config(tmp_path: Path):
    """Build an AgentConfig backed by a (missing) file in tmp_path."""

    def _make(**conntrack) -> AgentConfig:
        config = AgentConfig(str(tmp_path / "config.ini"))
        config.set('logging', 'log_file', str(tmp_path / "agent.log"))
        for option, value in conntrack.items():
            config.set('conntrack', option, value)
        return config

    return _make


@pytest.fixture
def logger() -> logging.Logger:
    return logging.getLogger("conntrack_agent.tests")


@pytest.fixture
def accumulator() -> MetricsAccumulator:
    return MetricsAccumulator()


@pytest.fixture
def conntrack_dir(tmp_path: Path):
    """Create a directory holding the given conntrack files."""

    def _make(name: str = "netfilter", **files) -> Path:
        directory = tmp_path / name
        directory.mkdir(parents=True, exist_ok=True)
        for filename, content in files.items():
            (directory / filename).write_text(content)
        return directory

    return _make


@pytest.fixture
def stat_factory():
    return make_stat


@pytest.fixture
def provider_factory():
    return FakeStatsProvider
