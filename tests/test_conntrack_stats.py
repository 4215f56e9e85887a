"""Tests for the conntrack statistics collector."""

from conntrack_agent.collectors.conntrack_stats import ConntrackStatsCollector
from conntrack_agent.collectors.platform import CONNTRACK_STAT_FIELDS
from conntrack_agent.core.accumulator import KIND_COUNTER
from conntrack_agent.core.exceptions import StatsProviderError


EXPECTED_FIELDS = {
    "entries": 1234,
    "searched": 10,
    "found": 1,
    "new": 5,
    "invalid": 43,
    "ignore": 13,
    "delete": 3,
    "delete_list": 5,
    "insert": 9,
    "insert_failed": 20,
    "drop": 49,
    "early_drop": 7,
    "icmp_error": 21,
    "expect_new": 12,
    "expect_create": 44,
    "expect_delete": 53,
    "search_restart": 31,
}


class TestConntrackStatsCollector:
    """Tests for ConntrackStatsCollector.collect."""

    def test_aggregate_record(self, make_config, logger, accumulator, stat_factory, provider_factory):
        provider = provider_factory([stat_factory()])
        collector = ConntrackStatsCollector(make_config(), logger, provider)

        collector.collect(accumulator)

        assert provider.calls == [False]
        [measurement] = accumulator.measurements
        assert measurement.name == "conntrack"
        assert measurement.kind == KIND_COUNTER
        assert measurement.tags == {"cpu": "all"}
        assert measurement.fields == EXPECTED_FIELDS
        assert all(type(value) is int for value in measurement.fields.values())
        assert accumulator.errors == []

    def test_schema_has_seventeen_fields(self):
        assert len(CONNTRACK_STAT_FIELDS) == 17
        assert set(CONNTRACK_STAT_FIELDS) == set(EXPECTED_FIELDS)

    def test_per_cpu_tags_in_provider_order(self, make_config, logger, accumulator, stat_factory,
                                            provider_factory):
        stats = [stat_factory(entries=i) for i in range(3)]
        provider = provider_factory(stats)
        collector = ConntrackStatsCollector(make_config(per_cpu=True), logger, provider)

        records = collector.collect(accumulator)

        assert provider.calls == [True]
        assert [m.tags["cpu"] for m in accumulator.measurements] == ["cpu0", "cpu1", "cpu2"]
        assert [m.fields["entries"] for m in accumulator.measurements] == [0, 1, 2]
        assert len(records) == 3

    def test_legacy_percpu_option(self, make_config, logger, accumulator, stat_factory,
                                  provider_factory):
        provider = provider_factory([stat_factory()])
        config = make_config(percpu=True)

        ConntrackStatsCollector(config, logger, provider).collect(accumulator)

        assert provider.calls == [True]
        assert accumulator.measurements[0].tags == {"cpu": "cpu0"}

    def test_multiple_entries_without_per_cpu_all_tagged_all(self, make_config, logger, accumulator,
                                                              stat_factory, provider_factory):
        provider = provider_factory([stat_factory(), stat_factory(entries=1)])

        ConntrackStatsCollector(make_config(), logger, provider).collect(accumulator)

        assert [m.tags for m in accumulator.measurements] == [{"cpu": "all"}, {"cpu": "all"}]

    def test_empty_provider_result(self, make_config, logger, accumulator, provider_factory):
        ConntrackStatsCollector(make_config(), logger, provider_factory([])).collect(accumulator)

        assert accumulator.measurements == []
        assert accumulator.errors == []

    def test_provider_error_is_non_fatal(self, make_config, logger, accumulator, provider_factory):
        provider = provider_factory(error=StatsProviderError("boom"))

        records = ConntrackStatsCollector(make_config(), logger, provider).collect(accumulator)

        assert records == []
        assert accumulator.measurements == []
        assert len(accumulator.errors) == 1
        assert "boom" in accumulator.errors[0]

    def test_unexpected_provider_exception_is_non_fatal(self, make_config, logger, accumulator,
                                                        provider_factory):
        provider = provider_factory(error=OSError("procfs vanished"))

        records = ConntrackStatsCollector(make_config(), logger, provider).collect(accumulator)

        assert records == []
        assert accumulator.measurements == []
        assert len(accumulator.errors) == 1
        assert "procfs vanished" in accumulator.errors[0]

    def test_negative_counter_skips_record_only(self, make_config, logger, accumulator, stat_factory,
                                                provider_factory):
        provider = provider_factory([stat_factory(drop=-1), stat_factory()])

        ConntrackStatsCollector(make_config(per_cpu=True), logger, provider).collect(accumulator)

        assert [m.tags["cpu"] for m in accumulator.measurements] == ["cpu1"]
        assert len(accumulator.errors) == 1
        assert "cpu0" in accumulator.errors[0]
