"""
Tests for the hierarchy store.

Covers:
    - Placement rejections (template, parent, containment, capacity)
    - Parent/child link integrity and cascade delete
    - Shallow vs transitive resource rollup
    - Deployment lifecycle with delayed settle
    - Health state machine
    - Platform-wide metrics
"""

import pytest

from conftest import build_tree
from platform_sim.application.services import HierarchyStore
from platform_sim.domain.config import get_node_template
from platform_sim.domain.models import (
    ComponentLayer,
    DeploymentStatus,
    Environment,
    HealthStatus,
    PlacementRejection,
    ResourceRequirements,
)


# =============================================================================
# Placement
# =============================================================================

class TestPlacement:

    def test_tree_builds_with_consistent_links(self, store, tree):
        assert store.node_count == 6
        assert store.root_ids() == [tree["region"]]
        k8s = store.get_node(tree["k8s"])
        assert k8s.child_ids == [tree["web"], tree["api"], tree["cron"]]
        assert store.get_node(tree["web"]).parent_id == tree["k8s"]
        assert store.verify_integrity() == []

    def test_node_built_from_template(self, store, tree):
        zone = store.get_node(tree["zone"])
        assert zone.layer is ComponentLayer.INFRASTRUCTURE
        assert zone.name == "us-east-1a"
        assert zone.metrics.cost == 1000
        assert zone.status.health is HealthStatus.HEALTHY
        assert store.get_node(tree["k8s"]).name == "Kubernetes Cluster"

    def test_missing_template(self, store):
        result = store.try_add_node({"type": "mainframe"})
        assert not result
        assert result.rejection is PlacementRejection.MISSING_TEMPLATE
        assert store.node_count == 0

    def test_missing_parent(self, store):
        result = store.try_add_node({"type": "kubernetes"}, "ghost")
        assert result.rejection is PlacementRejection.MISSING_PARENT

    def test_parent_required(self, store):
        result = store.try_add_node({"type": "compute"})
        assert result.rejection is PlacementRejection.PARENT_REQUIRED
        assert store.add_node({"type": "kubernetes"}) is None

    def test_containment(self, store):
        region = store.add_node({"type": "region"})
        compute = store.add_node({"type": "compute"}, region)
        k8s = store.add_node({"type": "kubernetes"}, compute)
        cache = store.add_node({"type": "cache"}, k8s)
        assert cache is not None

        result = store.try_add_node({"type": "compute"}, cache)
        assert result.rejection is PlacementRejection.CONTAINMENT
        assert store.get_node(cache).child_ids == []

        assert store.try_add_node({"type": "webApp"}, region).rejection is PlacementRejection.CONTAINMENT
        assert store.try_add_node({"type": "kubernetes"}, compute)

    def test_capacity(self, store, tree):
        # k8s holds cpu 40 / memory 448 of 100 / 512
        result = store.try_add_node({"type": "worker"}, tree["k8s"])
        assert result.rejection is PlacementRejection.CAPACITY

        assert store.add_node({"type": "cronJob"}, tree["k8s"]) is not None
        # memory now exactly full
        assert store.try_add_node({"type": "cronJob"}, tree["k8s"]).rejection is PlacementRejection.CAPACITY

    def test_rejection_leaves_state_untouched(self, store, tree):
        before = store.get_state()
        store.try_add_node({"type": "worker"}, tree["k8s"])
        assert store.get_state() == before

    @pytest.mark.parametrize("node_type", ["webApp", "apiService", "worker", "cronJob", "function", "cache"])
    def test_can_accept_matches_available_resources(self, store, tree, node_type):
        available = store.get_node_resources(tree["k8s"])
        requirement = get_node_template(node_type).resources
        assert store.can_accept_node(tree["k8s"], node_type) == available.fits(requirement)

    def test_can_accept_without_parent(self, store):
        assert not store.can_accept_node(None, "region")

    def test_node_data_overrides(self, store):
        region = store.add_node({
            "type": "region",
            "name": "eu-west",
            "position": {"x": 5, "y": 7},
            "config": {"replicas": 2},
        })
        node = store.get_node(region)
        assert node.name == "eu-west"
        assert (node.position.x, node.position.y) == (5, 7)
        assert node.config.replicas == 2


# =============================================================================
# Delete
# =============================================================================

class TestDelete:

    def test_cascade_delete(self, store, tree, scheduler):
        deployment_id = store.deploy_application(tree["web"], tree["k8s"])
        store.delete_node(tree["zone"])

        assert store.node_count == 1
        for key in ("zone", "k8s", "web", "api", "cron"):
            assert store.get_node(tree[key]) is None
        assert store.get_node(tree["region"]).child_ids == []
        assert store.get_deployment(deployment_id) is None
        assert scheduler.pending == 0
        assert store.verify_integrity() == []

    def test_delete_leaf_detaches_from_parent(self, store, tree):
        store.delete_node(tree["api"])
        assert store.get_node(tree["k8s"]).child_ids == [tree["web"], tree["cron"]]
        assert store.verify_integrity() == []

    def test_delete_drops_deployments_of_deleted_application(self, store, tree):
        deployment_id = store.deploy_application(tree["api"], tree["k8s"])
        store.delete_node(tree["api"])
        assert store.get_deployment(deployment_id) is None

    def test_delete_unknown_is_noop(self, store, tree):
        before = store.get_state()
        store.delete_node("ghost")
        assert store.get_state() == before

    def test_delete_clears_selection(self, store, tree):
        store.select_node(tree["web"])
        assert store.selected_node_id == tree["web"]
        store.delete_node(tree["k8s"])
        assert store.selected_node_id is None

    def test_select_unknown_is_ignored(self, store, tree):
        store.select_node(tree["api"])
        store.select_node("ghost")
        assert store.selected_node_id == tree["api"]

    def test_integrity_after_mixed_operations(self, store, tree):
        store.add_node({"type": "kubernetes"}, tree["zone"])
        store.delete_node(tree["web"])
        store.add_node({"type": "apiGateway"}, tree["region"])
        store.delete_node(tree["k8s"])
        assert store.verify_integrity() == []
        assert store.containment_graph().number_of_nodes() == store.node_count


# =============================================================================
# Resources
# =============================================================================

class TestResourceRollup:

    def test_shallow_counts_direct_children(self, store, tree):
        k8s = store.get_node_resources(tree["k8s"])
        assert (k8s.allocated_cpu, k8s.allocated_memory) == (40, 448)
        assert (k8s.available_cpu, k8s.available_memory) == (60, 64)

        zone = store.get_node_resources(tree["zone"])
        assert (zone.allocated_cpu, zone.allocated_memory) == (100, 512)

    def test_transitive_counts_whole_subtree(self, transitive_store, transitive_tree):
        zone = transitive_store.get_node_resources(transitive_tree["zone"])
        assert (zone.allocated_cpu, zone.allocated_memory) == (140, 960)

    def test_nodes_without_resources(self, store, tree):
        assert store.get_node_resources(tree["region"]) is None
        assert store.get_node_resources("ghost") is None

    def test_stored_node_keeps_zero_allocation(self, store, tree):
        assert store.get_node(tree["k8s"]).resources.allocated_cpu == 0
        assert store.get_state().nodes[tree["k8s"]].resources.allocated_cpu == 40

    def test_running_deployments_count_on_target(self, store, tree, scheduler):
        store.deploy_application(tree["web"], tree["k8s"])
        assert store.get_node_resources(tree["k8s"]).allocated_cpu == 40
        scheduler.advance(2.0)
        assert store.get_node_resources(tree["k8s"]).allocated_cpu == 50

    def test_transitive_counts_deployments_in_subtree(
        self, transitive_store, transitive_tree, scheduler
    ):
        transitive_store.deploy_application(transitive_tree["api"], transitive_tree["k8s"])
        scheduler.run_all()
        zone = transitive_store.get_node_resources(transitive_tree["zone"])
        assert zone.allocated_cpu == 165

    def test_utilization(self, store, tree):
        k8s = store.get_node_resources(tree["k8s"])
        # memory is the tightest dimension: 448 / 512
        assert k8s.utilization == pytest.approx(87.5)


# =============================================================================
# Deployments
# =============================================================================

class TestDeployments:

    def test_lifecycle(self, store, tree, scheduler):
        deployment_id = store.deploy_application(tree["web"], tree["k8s"], "production")
        deployment = store.get_deployment(deployment_id)
        assert deployment_id.startswith("deploy-")
        assert deployment.status is DeploymentStatus.DEPLOYING
        assert deployment.environment is Environment.PRODUCTION
        assert deployment.version == "1.0.0"
        assert deployment.replicas == 1
        assert deployment.resources == ResourceRequirements(cpu=10, memory=128)
        assert deployment_id in store.settling_deployment_ids

        scheduler.advance(1.0)
        assert store.get_deployment(deployment_id).status is DeploymentStatus.DEPLOYING
        scheduler.advance(1.0)
        assert store.get_deployment(deployment_id).status is DeploymentStatus.RUNNING
        assert store.settling_deployment_ids == frozenset()

    def test_replicas_follow_application_config(self, store, tree, scheduler):
        store.update_node(tree["api"], {"config": {"replicas": 3}})
        deployment_id = store.deploy_application(tree["api"], tree["k8s"])
        scheduler.run_all()
        assert store.get_deployment(deployment_id).allocated.cpu == 75

    def test_default_environment(self, store, tree):
        deployment_id = store.deploy_application(tree["cron"], tree["k8s"])
        assert store.get_deployment(deployment_id).environment is Environment.DEVELOPMENT

    def test_deploy_to_service_node(self, store, scheduler):
        region = store.add_node({"type": "region"})
        compute = store.add_node({"type": "compute"}, region)
        data_cluster = store.add_node({"type": "kubernetes"}, compute)
        app_cluster = store.add_node({"type": "kubernetes"}, compute)
        cache = store.add_node({"type": "cache"}, data_cluster)
        web = store.add_node({"type": "webApp"}, app_cluster)

        deployment_id = store.deploy_application(web, cache)
        assert deployment_id is not None
        scheduler.run_all()
        assert store.get_node_resources(cache).allocated_cpu == 10

    @pytest.mark.parametrize("app_key,target_key", [
        ("k8s", "k8s"),
        ("web", "api"),
        ("web", "zone"),
        ("web", "region"),
        ("web", "ghost"),
        ("ghost", "k8s"),
    ])
    def test_invalid_pairs(self, store, tree, app_key, target_key):
        app_id = tree.get(app_key, app_key)
        target_id = tree.get(target_key, target_key)
        assert store.deploy_application(app_id, target_id) is None
        assert store.get_state().deployments == ()

    def test_unknown_environment(self, store, tree):
        assert store.deploy_application(tree["web"], tree["k8s"], "moon") is None

    def test_remove_deployment_cancels_settle(self, store, tree, scheduler):
        deployment_id = store.deploy_application(tree["web"], tree["k8s"])
        store.remove_deployment(deployment_id)
        assert scheduler.pending == 0
        assert store.get_deployment(deployment_id) is None

    def test_settle_after_delete_is_harmless(self, non_cancelling_scheduler):
        store = HierarchyStore(scheduler=non_cancelling_scheduler)
        ids = build_tree(store)
        store.deploy_application(ids["web"], ids["k8s"])
        store.delete_node(ids["k8s"])
        non_cancelling_scheduler.fire_all()
        assert store.get_state().deployments == ()

    def test_without_scheduler_settles_at_once(self):
        store = HierarchyStore()
        ids = build_tree(store)
        deployment_id = store.deploy_application(ids["web"], ids["k8s"])
        assert store.get_deployment(deployment_id).status is DeploymentStatus.RUNNING

    def test_update_deployment(self, store, tree):
        deployment_id = store.deploy_application(tree["web"], tree["k8s"])
        store.update_deployment(deployment_id, {"version": "2.0.0", "status": "failed"})
        deployment = store.get_deployment(deployment_id)
        assert deployment.version == "2.0.0"
        assert deployment.status is DeploymentStatus.FAILED


# =============================================================================
# Node Updates and Health
# =============================================================================

class TestNodeUpdates:

    def test_structural_fields_are_protected(self, store, tree):
        store.update_node(tree["web"], {
            "id": "other",
            "parent_id": None,
            "child_ids": ["x"],
            "layer": "infrastructure",
            "name": "storefront",
        })
        web = store.get_node(tree["web"])
        assert web.name == "storefront"
        assert web.parent_id == tree["k8s"]
        assert web.child_ids == []
        assert web.layer is ComponentLayer.APPLICATION
        assert store.verify_integrity() == []

    def test_partial_nested_update(self, store, tree):
        store.update_node(tree["web"], {"config": {"auto_scaling": True}, "metrics": {"efficiency": 60}})
        web = store.get_node(tree["web"])
        assert web.config.auto_scaling is True
        assert web.config.replicas == 1
        assert web.metrics.efficiency == 60
        assert web.metrics.cost == 20

    def test_unknown_health_in_update_is_ignored(self, store, tree):
        store.update_node(tree["web"], {"status": {"health": "on fire"}})
        assert store.get_node(tree["web"]).status.health is HealthStatus.HEALTHY


class TestHealthStateMachine:

    def test_adjacent_steps(self, store, tree):
        node = tree["api"]
        assert store.set_node_health(node, "degraded")
        assert store.set_node_health(node, HealthStatus.UNHEALTHY)
        assert store.set_node_health(node, "degraded")
        assert store.set_node_health(node, "healthy")
        assert store.get_node(node).status.health is HealthStatus.HEALTHY

    def test_jump_over_degraded_is_refused(self, store, tree):
        assert not store.set_node_health(tree["api"], "unhealthy")
        store.set_node_health(tree["api"], "degraded")
        store.set_node_health(tree["api"], "unhealthy")
        assert not store.set_node_health(tree["api"], "healthy")
        assert store.get_node(tree["api"]).status.health is HealthStatus.UNHEALTHY

    def test_same_state_and_invalid_input(self, store, tree):
        assert store.set_node_health(tree["api"], "healthy")
        assert not store.set_node_health(tree["api"], "bogus")
        assert not store.set_node_health("ghost", "degraded")


# =============================================================================
# Global Metrics
# =============================================================================

class TestGlobalMetrics:

    def test_empty_store(self, store):
        metrics = store.calculate_global_metrics()
        assert metrics.total_cost == 0
        assert metrics.application_count == 0
        assert metrics.platform_maturity == 0

    def test_tree_metrics(self, store, tree):
        metrics = store.calculate_global_metrics()
        # region 500 + compute 1000 + kubernetes 150; applications are not costed
        assert metrics.total_cost == 1650
        assert metrics.total_resources.cpu == 1000
        assert metrics.total_resources.memory == 4096
        assert metrics.application_count == 3
        assert metrics.platform_maturity == 30
        assert metrics.service_health == 100
        assert metrics.operational_excellence == 80

    def test_health_and_allocation(self, store, tree, scheduler):
        store.set_node_health(tree["web"], "degraded")
        store.deploy_application(tree["web"], tree["k8s"])
        scheduler.run_all()
        metrics = store.calculate_global_metrics()
        # (5 * 100 + 50) / 6
        assert metrics.service_health == 92
        assert metrics.total_resources.allocated_cpu == 10

    def test_maturity_caps_at_100(self, store):
        region = store.add_node({"type": "region"})
        for _ in range(25):
            store.add_node({"type": "storage"}, region)
        assert store.calculate_global_metrics().platform_maturity == 100


class TestHierarchySubscribers:

    def test_notified_with_derived_resources(self, store):
        states = []
        store.subscribe(states.append)
        ids = build_tree(store)
        assert len(states) == 6
        assert states[-1].nodes[ids["k8s"]].resources.allocated_cpu == 40
