"""
Tests for the scoring side.

Covers:
    - Per-component metric derivation (purity, monotonicity, clamp)
    - Global aggregation with severity-weighted impacts and rounding
    - Issue detection rules and their extensibility
    - ScoringEngine add / update / remove / resolve / connect
    - Delayed issue resolution through the scheduler
    - Subscriber isolation
"""

import dataclasses
import itertools

import pytest

from platform_sim.application.services import ScoringEngine
from platform_sim.domain.models import (
    ComponentConfig,
    ComponentMetrics,
    ComponentType,
    DEFAULT_GLOBAL_METRICS,
    GlobalMetrics,
    IssueImpact,
    IssueSeverity,
    IssueType,
    PlatformComponent,
)
from platform_sim.domain.services import (
    IssueDetector,
    IssueRule,
    aggregate_global_metrics,
    create_component,
    derive_component_metrics,
    make_issue,
    round_half_up,
)
from platform_sim.domain.services.metric_calculator import (
    PERFORMANCE_BONUSES,
    RELIABILITY_BONUSES,
    SECURITY_BONUSES,
)

FLAG_GROUPS = [
    ("security", "security", SECURITY_BONUSES),
    ("performance", "performance", PERFORMANCE_BONUSES),
    ("reliability", "reliability", RELIABILITY_BONUSES),
]


def _config_with(group: str, flags) -> ComponentConfig:
    return ComponentConfig.from_dict({group: {flag: True for flag in flags}})


# =============================================================================
# Metric Derivation
# =============================================================================

class TestDeriveComponentMetrics:

    def test_all_flags_off_gives_base_scores(self):
        metrics = derive_component_metrics(ComponentConfig(), ComponentMetrics(cost=500, complexity=30))
        assert (metrics.security, metrics.performance, metrics.reliability) == (60, 60, 60)
        assert metrics.cost == 500
        assert metrics.complexity == 30

    def test_idempotent(self):
        config = _config_with("security", ["encryption", "security_review"])
        once = derive_component_metrics(config, ComponentMetrics())
        twice = derive_component_metrics(config, once)
        assert once == twice

    @pytest.mark.parametrize("group,metric,bonuses", FLAG_GROUPS)
    def test_each_flag_adds_its_bonus(self, group, metric, bonuses):
        for flag, bonus in bonuses.items():
            metrics = derive_component_metrics(_config_with(group, [flag]), ComponentMetrics())
            assert getattr(metrics, metric) == 60 + bonus

    @pytest.mark.parametrize("group,metric,bonuses", FLAG_GROUPS)
    def test_enabling_a_flag_never_lowers_its_metric(self, group, metric, bonuses):
        flags = list(bonuses)
        for size in range(len(flags)):
            for enabled in itertools.combinations(flags, size):
                before = getattr(
                    derive_component_metrics(_config_with(group, enabled), ComponentMetrics()), metric
                )
                for extra in set(flags) - set(enabled):
                    after = getattr(
                        derive_component_metrics(
                            _config_with(group, list(enabled) + [extra]), ComponentMetrics()
                        ),
                        metric,
                    )
                    assert after >= before

    @pytest.mark.parametrize("group,metric,bonuses", FLAG_GROUPS)
    def test_all_flags_clamped_to_100(self, group, metric, bonuses):
        metrics = derive_component_metrics(_config_with(group, bonuses), ComponentMetrics())
        assert getattr(metrics, metric) == 100

    def test_input_metrics_not_mutated(self):
        current = ComponentMetrics(security=20)
        derive_component_metrics(_config_with("security", ["encryption"]), current)
        assert current.security == 20


# =============================================================================
# Global Aggregation
# =============================================================================

class TestAggregateGlobalMetrics:

    def test_empty_platform_returns_defaults(self):
        metrics = aggregate_global_metrics([], [], total_time=12.0)
        assert metrics == GlobalMetrics(
            user_satisfaction=80, developer_velocity=80, security_score=80,
            technical_debt=20, performance_score=80, adoption_rate=50,
            total_cost=0, time_to_market=30,
        )

    def test_no_issues(self):
        components = [
            PlatformComponent("a", ComponentType.CACHE, "a",
                              metrics=ComponentMetrics(performance=90, security=50, cost=200, complexity=20)),
            PlatformComponent("b", ComponentType.QUEUE, "b",
                              metrics=ComponentMetrics(performance=70, security=70, cost=180, complexity=40)),
        ]
        metrics = aggregate_global_metrics(components, [], total_time=0)
        assert metrics.user_satisfaction == 80
        assert metrics.performance_score == 80
        assert metrics.security_score == 60
        assert metrics.developer_velocity == 50
        assert metrics.technical_debt == 30
        assert metrics.adoption_rate == 80
        assert metrics.total_cost == 380
        assert metrics.time_to_market == 1

    def test_severity_weighting(self):
        component = PlatformComponent("a", ComponentType.API, "a", metrics=ComponentMetrics(performance=80))
        issues = [
            make_issue(IssueType.PERFORMANCE, severity, "t", "d", "a",
                       IssueImpact(performance_score=10))
            for severity in (IssueSeverity.LOW, IssueSeverity.CRITICAL)
        ]
        metrics = aggregate_global_metrics([component], issues, total_time=0)
        # 80 - (10 * 0.5 + 10 * 4)
        assert metrics.performance_score == 35

    def test_scores_floor_at_zero_and_debt_caps_at_100(self):
        component = PlatformComponent("a", ComponentType.API, "a",
                                      metrics=ComponentMetrics(complexity=90))
        issues = [
            make_issue(IssueType.SECURITY, IssueSeverity.CRITICAL, "t", "d", "a",
                       IssueImpact(security_score=50, user_satisfaction=50, developer_velocity=50))
            for _ in range(3)
        ]
        metrics = aggregate_global_metrics([component], issues, total_time=0)
        assert metrics.security_score == 0
        assert metrics.user_satisfaction == 0
        assert metrics.developer_velocity == 0
        assert metrics.technical_debt == 100

    def test_time_to_market_one_decimal(self):
        component = PlatformComponent("a", ComponentType.CACHE, "a")
        issue = make_issue(IssueType.RELIABILITY, IssueSeverity.LOW, "t", "d", "a", IssueImpact())
        metrics = aggregate_global_metrics([component], [issue], total_time=2.3333)
        assert metrics.time_to_market == pytest.approx(2.8)

    def test_half_up_rounding(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(0.5) == 1
        assert round_half_up(1.25, 1) == pytest.approx(1.3)
        assert isinstance(round_half_up(7.0), int)


# =============================================================================
# Issue Detection
# =============================================================================

class TestIssueDetector:

    def test_bare_api_violates_both_rules(self, bare_api):
        issues = IssueDetector().detect(bare_api)
        by_title = {i.title: i for i in issues}
        assert set(by_title) == {"API without Security Review", "No Rate Limiting"}

        review = by_title["API without Security Review"]
        assert review.severity is IssueSeverity.HIGH
        assert review.type is IssueType.SECURITY
        assert review.impact == IssueImpact(user_satisfaction=20, security_score=30, cost=50000)
        assert review.time_to_resolve == 24
        assert review.cost == 50000

        rate = by_title["No Rate Limiting"]
        assert rate.severity is IssueSeverity.MEDIUM
        assert rate.type is IssueType.PERFORMANCE
        assert rate.impact == IssueImpact(
            user_satisfaction=15, developer_velocity=5, security_score=5,
            performance_score=25, cost=10000,
        )
        assert rate.time_to_resolve == 8

    def test_hardened_api_is_clean(self, hardened_api):
        assert IssueDetector().detect(hardened_api) == []

    def test_zero_rate_limit_counts_as_missing(self, hardened_api):
        hardened_api.config.rate_limit = 0
        titles = [i.title for i in IssueDetector().detect(hardened_api)]
        assert titles == ["No Rate Limiting"]

    def test_rules_only_apply_to_apis(self):
        database = PlatformComponent("db", ComponentType.DATABASE, "db")
        assert IssueDetector().detect(database) == []

    def test_issue_ids_are_unique(self, bare_api):
        detector = IssueDetector()
        ids = [i.id for _ in range(5) for i in detector.detect(bare_api)]
        assert len(ids) == len(set(ids))

    def test_custom_rule(self):
        rule = IssueRule(
            name="db-backups",
            predicate=lambda c: c.type == ComponentType.DATABASE and not c.config.reliability.backups,
            factory=lambda c: make_issue(
                IssueType.RELIABILITY, IssueSeverity.CRITICAL, "No Backups", "d", c.id, IssueImpact()
            ),
        )
        detector = IssueDetector(rules=[rule])
        database = PlatformComponent("db", ComponentType.DATABASE, "db")
        issues = detector.detect(database)
        assert len(issues) == 1
        assert issues[0].time_to_resolve == 72


# =============================================================================
# ScoringEngine
# =============================================================================

class TestScoringEngineAdd:

    def test_single_under_configured_api(self, engine, bare_api):
        engine.add_component(bare_api)
        state = engine.get_state()

        component = state.get_component("api-1")
        assert (component.metrics.security, component.metrics.performance,
                component.metrics.reliability) == (60, 60, 60)
        assert len(state.issues) == 2
        assert {i.severity for i in state.issues} == {IssueSeverity.HIGH, IssueSeverity.MEDIUM}

        # security 60 - (30 * 2 + 5 * 1)
        assert state.metrics.security_score == 0
        assert state.metrics.user_satisfaction == 5
        assert state.metrics.developer_velocity == 75
        assert state.metrics.performance_score == 35
        assert state.metrics.technical_debt == 10
        assert state.metrics.adoption_rate == 11
        assert state.metrics.time_to_market == pytest.approx(1.0)

    def test_component_issue_list_tracks_active_issues(self, engine, bare_api):
        engine.add_component(bare_api)
        assert len(engine.get_component("api-1").issues) == 2

    def test_engine_keeps_its_own_copy(self, engine, bare_api):
        engine.add_component(bare_api)
        bare_api.name = "changed outside"
        assert engine.get_component("api-1").name == "Bare API"

    def test_snapshot_is_detached(self, engine, bare_api):
        engine.add_component(bare_api)
        state = engine.get_state()
        state.components[0].name = "edited"
        assert engine.get_component("api-1").name == "Bare API"

    def test_template_component(self, engine):
        engine.add_component(create_component(ComponentType.API, component_id="api"))
        titles = [i.title for i in engine.get_state().issues]
        assert titles == ["API without Security Review"]
        assert engine.metrics.total_cost == 500


class TestScoringEngineUpdate:

    def test_update_rederives_metrics(self, engine, bare_api):
        engine.add_component(bare_api)
        engine.update_component("api-1", {"config": {"security": {"encryption": True}}})
        assert engine.get_component("api-1").metrics.security == 70

    def test_partial_config_merge_keeps_other_flags(self, engine, hardened_api):
        engine.add_component(hardened_api)
        engine.update_component("api-2", {"config": {"performance": {"caching": True}}})
        config = engine.get_component("api-2").config
        assert config.performance.caching is True
        assert config.security.security_review is True
        assert config.rate_limit == 500

    def test_update_accepts_full_config_object(self, engine, bare_api):
        engine.add_component(bare_api)
        config = ComponentConfig.from_dict({"reliability": {"backups": True}, "rate_limit": 10})
        engine.update_component("api-1", {"config": config})
        assert engine.get_component("api-1").metrics.reliability == 75

    def test_update_duplicates_issues_of_still_violating_component(self, engine, bare_api):
        engine.add_component(bare_api)
        engine.update_component("api-1", {"name": "Renamed"})
        assert len(engine.get_state().issues) == 4

    def test_update_unknown_id_is_noop(self, engine, bare_api):
        engine.add_component(bare_api)
        before = engine.get_state()
        calls = []
        engine.subscribe(calls.append)
        engine.update_component("ghost", {"name": "x"})
        assert engine.get_state() == before
        assert calls == []

    def test_cost_and_complexity_survive_updates(self, engine, hardened_api):
        engine.add_component(hardened_api)
        engine.update_component("api-2", {"config": {"security": {"encryption": False}}})
        metrics = engine.get_component("api-2").metrics
        assert metrics.cost == 500
        assert metrics.complexity == 30

    def test_type_update_is_stored_as_enum(self, engine, bare_api):
        engine.add_component(bare_api)
        engine.update_component("api-1", {"type": "cache"})
        component = engine.get_component("api-1")
        assert component.type is ComponentType.CACHE
        assert component.to_dict()["type"] == "cache"
        assert engine.get_state().to_dict()["components"][0]["type"] == "cache"

    def test_unknown_type_update_is_ignored(self, engine, bare_api):
        engine.add_component(bare_api)
        engine.update_component("api-1", {"type": "mainframe"})
        assert engine.get_component("api-1").type is ComponentType.API

    def test_id_cannot_be_rewritten(self, engine, bare_api):
        engine.add_component(bare_api)
        engine.update_component("api-1", {"id": "other"})
        assert engine.get_component("api-1") is not None
        assert engine.get_component("other") is None


class TestScoringEngineRemove:

    def test_remove_drops_component_and_its_issues(self, engine, bare_api, hardened_api):
        engine.add_component(bare_api)
        engine.add_component(hardened_api)
        engine.remove_component("api-1")
        state = engine.get_state()
        assert [c.id for c in state.components] == ["api-2"]
        assert state.issues == ()

    def test_remove_strips_dangling_connections(self, engine, bare_api, hardened_api):
        engine.add_component(bare_api)
        engine.add_component(hardened_api)
        assert engine.connect_components("api-2", "api-1")
        engine.remove_component("api-1")
        assert engine.get_component("api-2").connections == []

    def test_removing_last_component_restores_defaults(self, engine, bare_api):
        engine.add_component(bare_api)
        engine.remove_component("api-1")
        assert engine.metrics == DEFAULT_GLOBAL_METRICS

    def test_remove_unknown_is_noop(self, engine):
        calls = []
        engine.subscribe(calls.append)
        engine.remove_component("ghost")
        assert calls == []


class TestScoringEngineConnections:

    def test_connect_rejects_unknown_and_self(self, engine, bare_api):
        engine.add_component(bare_api)
        assert not engine.connect_components("api-1", "ghost")
        assert not engine.connect_components("api-1", "api-1")

    def test_connect_is_idempotent(self, engine, bare_api, hardened_api):
        engine.add_component(bare_api)
        engine.add_component(hardened_api)
        engine.connect_components("api-1", "api-2")
        engine.connect_components("api-1", "api-2")
        assert engine.get_component("api-1").connections == ["api-2"]
        assert engine.disconnect_components("api-1", "api-2")
        assert not engine.disconnect_components("api-1", "api-2")


class TestScoringEngineResolve:

    def test_resolve_removes_exactly_one_and_advances_time(self, engine, bare_api):
        engine.add_component(bare_api)
        issues = engine.get_state().issues
        for issue in issues:
            before = engine.get_state()
            engine.resolve_issue(issue.id)
            after = engine.get_state()
            assert len(after.issues) == len(before.issues) - 1
            assert after.total_time == pytest.approx(before.total_time + issue.time_to_resolve / 24)
            assert after.total_time > before.total_time
        assert engine.get_component("api-1").issues == []

    def test_resolve_unknown_is_noop(self, engine, bare_api):
        engine.add_component(bare_api)
        before = engine.get_state()
        engine.resolve_issue("ghost")
        assert engine.get_state() == before

    def test_resolve_recomputes_metrics(self, engine, bare_api):
        engine.add_component(bare_api)
        high = next(i for i in engine.get_state().issues if i.severity is IssueSeverity.HIGH)
        engine.resolve_issue(high.id)
        # only the MEDIUM issue remains: 60 - 5
        assert engine.metrics.security_score == 55
        # 1 day elapsed + 0.5 per remaining issue
        assert engine.metrics.time_to_market == pytest.approx(1.5)

    def test_summary(self, engine, bare_api, hardened_api):
        engine.add_component(bare_api)
        engine.add_component(hardened_api)
        summary = engine.summarize_issues()
        assert summary.total_issues == 2
        assert summary.by_severity == {"low": 0, "medium": 1, "high": 1, "critical": 0}
        assert summary.by_type["security"] == 1
        assert summary.by_type["performance"] == 1
        assert summary.affected_components == 1
        assert summary.total_resolution_hours == 32
        assert summary.total_resolution_cost == 60000
        assert summary.requires_attention == 1
        assert not summary.has_critical


class TestDelayedResolution:

    def test_fix_lands_after_delay(self, engine, scheduler, bare_api):
        engine.add_component(bare_api)
        issue = engine.get_state().issues[0]

        assert engine.begin_issue_resolution(issue.id)
        assert issue.id in engine.resolving_issue_ids
        scheduler.advance(1.0)
        assert len(engine.get_state().issues) == 2

        scheduler.advance(0.5)
        assert len(engine.get_state().issues) == 1
        assert engine.resolving_issue_ids == frozenset()

    def test_double_trigger_advances_time_once(self, engine, scheduler, bare_api):
        engine.add_component(bare_api)
        issue = engine.get_state().issues[0]
        engine.begin_issue_resolution(issue.id)
        engine.begin_issue_resolution(issue.id)
        scheduler.run_all()
        assert engine.total_time == pytest.approx(issue.time_to_resolve / 24)

    def test_completion_after_manual_resolve_is_harmless(self, non_cancelling_scheduler, bare_api):
        engine = ScoringEngine(scheduler=non_cancelling_scheduler)
        engine.add_component(bare_api)
        issue = engine.get_state().issues[0]
        engine.begin_issue_resolution(issue.id)
        engine.begin_issue_resolution(issue.id)
        engine.resolve_issue(issue.id)
        non_cancelling_scheduler.fire_all()
        assert engine.total_time == pytest.approx(issue.time_to_resolve / 24)
        assert len(engine.get_state().issues) == 1

    def test_removing_component_cancels_pending_fix(self, engine, scheduler, bare_api):
        engine.add_component(bare_api)
        issue = engine.get_state().issues[0]
        engine.begin_issue_resolution(issue.id)
        engine.remove_component("api-1")
        assert scheduler.pending == 0
        assert scheduler.run_all() == 0
        assert engine.total_time == 0

    def test_unknown_issue(self, engine):
        assert not engine.begin_issue_resolution("ghost")

    def test_without_scheduler_fix_is_immediate(self, bare_api):
        engine = ScoringEngine()
        engine.add_component(bare_api)
        issue = engine.get_state().issues[0]
        assert engine.begin_issue_resolution(issue.id)
        assert len(engine.get_state().issues) == 1


class TestSubscribers:

    def test_notified_after_each_mutation(self, engine, bare_api):
        states = []
        engine.subscribe(states.append)
        engine.add_component(bare_api)
        engine.update_component("api-1", {"name": "x"})
        engine.remove_component("api-1")
        assert [len(s.components) for s in states] == [1, 1, 0]

    def test_unsubscribe(self, engine, bare_api):
        states = []
        unsubscribe = engine.subscribe(states.append)
        unsubscribe()
        engine.add_component(bare_api)
        assert states == []

    def test_failing_subscriber_is_isolated(self, engine, bare_api, caplog):
        received = []

        def broken(state):
            raise RuntimeError("dashboard crashed")

        engine.subscribe(broken)
        engine.subscribe(received.append)
        engine.add_component(bare_api)

        assert len(received) == 1
        assert engine.get_component("api-1") is not None
        assert "dashboard crashed" in caplog.text

    def test_subscriber_cannot_mutate_engine(self, engine, bare_api):
        def vandal(state):
            state.components[0].metrics = dataclasses.replace(
                state.components[0].metrics, security=0
            )

        engine.subscribe(vandal)
        engine.add_component(bare_api)
        assert engine.get_component("api-1").metrics.security == 60


class TestSecRelCheckpointFromEngine:

    def test_pure_evaluation(self, engine, hardened_api):
        engine.add_component(hardened_api)
        before = engine.get_state()
        component = engine.get_component("api-2")
        checkpoint = engine.create_secrel_checkpoint("securityReview", component)
        assert checkpoint.passed
        assert engine.get_state() == before
