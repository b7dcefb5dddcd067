"""
Tests for the HTTP API.
Verifies request validation and that engine failures map to the right status codes.
"""
import pytest
from unittest.mock import patch

from infrasizing.main import health
from infrasizing.services.cost_estimator import CostEstimatorError


@pytest.fixture
def vm_request_payload():
    return {
        "technology": "dotnet",
        "environments": {
            "prod": {
                "roles": [{"role": "web", "tier": "medium", "instance_count": 2}],
                "ha_pattern": "active_passive",
                "load_balancer": "ha_pair",
            }
        },
    }


@pytest.mark.asyncio
async def test_health_handler():
    assert await health() == {"status": "ok"}


def test_health_endpoint(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


class TestSizingEndpoints:

    def test_k8s_sizing(self, client, k8s_request_payload):
        response = client.post("/api/sizing/k8s", json=k8s_request_payload)
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "ok"
        environments = [env["environment"] for env in data["sizing"]["environments"]]
        assert environments == ["dev", "prod"]

        prod = data["sizing"]["environments"][1]
        assert prod["masters"] == 0
        assert prod["managed_control_plane_nodes"] == 3
        assert prod["total_nodes"] == prod["workers"]

    def test_unknown_distribution_is_422(self, client, k8s_request_payload):
        k8s_request_payload["distribution"] = "plan9"
        response = client.post("/api/sizing/k8s", json=k8s_request_payload)
        assert response.status_code == 422
        assert "plan9" in response.json()["detail"]

    def test_prod_disabled_is_422(self, client, k8s_request_payload):
        k8s_request_payload["enabled_environments"] = ["dev"]
        response = client.post("/api/sizing/k8s", json=k8s_request_payload)
        assert response.status_code == 422

    def test_negative_app_count_rejected(self, client, k8s_request_payload):
        k8s_request_payload["prod_apps"] = {"small": -1}
        response = client.post("/api/sizing/k8s", json=k8s_request_payload)
        assert response.status_code == 422

    def test_invalid_hadr_block_is_400(self, client, k8s_request_payload):
        k8s_request_payload["hadr"] = {"control_plane_nodes": 0}
        response = client.post("/api/sizing/k8s", json=k8s_request_payload)
        assert response.status_code == 400

    def test_policy_overrides_merge_with_defaults(self, client, k8s_request_payload):
        k8s_request_payload["policy"] = {"replicas": {"prod": 5}}
        response = client.post("/api/sizing/k8s", json=k8s_request_payload)
        assert response.status_code == 200

        dev, prod = response.json()["sizing"]["environments"]
        assert prod["replicas"] == 5
        assert dev["replicas"] == 1

    def test_per_environment_mode(self, client, k8s_request_payload):
        k8s_request_payload["cluster_mode"] = "per_environment"
        k8s_request_payload["selected_environment"] = "dev"
        response = client.post("/api/sizing/k8s", json=k8s_request_payload)
        assert response.status_code == 200

        environments = response.json()["sizing"]["environments"]
        assert [env["environment"] for env in environments] == ["dev"]
        assert environments[0]["environment_name"] == "Dev Cluster"

    def test_vm_sizing(self, client, vm_request_payload):
        response = client.post("/api/sizing/vm", json=vm_request_payload)
        assert response.status_code == 200

        prod = response.json()["sizing"]["environments"][0]
        assert prod["roles"][0]["total_instances"] == 4
        assert prod["total_vms"] == 6


class TestCostEndpoints:

    def test_cloud_estimate(self, client, k8s_request_payload):
        response = client.post("/api/costs/estimate", json={
            "sizing": k8s_request_payload,
            "cloud": {"provider": "aws", "support_plan": "business"},
        })
        assert response.status_code == 200

        estimate = response.json()["estimate"]
        assert estimate["provider"] == "aws"
        assert estimate["region"] == "us-east-1"
        assert estimate["yearly_total"] == pytest.approx(estimate["monthly_total"] * 12, abs=0.05)

    def test_default_provider(self, client, k8s_request_payload):
        response = client.post("/api/costs/estimate", json={"sizing": k8s_request_payload, "cloud": {}})
        assert response.status_code == 200
        assert response.json()["estimate"]["provider"] == "aws"

    def test_unknown_provider_is_reported(self, client, k8s_request_payload):
        response = client.post("/api/costs/estimate", json={
            "sizing": k8s_request_payload,
            "cloud": {"provider": "nimbus"},
        })
        assert response.status_code == 200

        estimate = response.json()["estimate"]
        assert estimate["provider"] == "aws"
        assert any("nimbus" in assumption for assumption in estimate["assumptions"])

    def test_sized_hadr_posture_is_priced(self, client, k8s_request_payload):
        k8s_request_payload["hadr"] = {"dr_pattern": "warm_standby", "node_distribution": "single_az",
                                       "availability_zones": 1}
        response = client.post("/api/costs/estimate", json={"sizing": k8s_request_payload, "cloud": {}})
        assert response.status_code == 200

        body = response.json()
        prod = next(env for env in body["sizing"]["environments"] if env["environment"] == "prod")
        assert prod["hadr"]["dr_pattern"] == "warm_standby"
        assert body["estimate"]["hadr_multiplier"] > 1.0

    def test_on_prem_estimate_with_overrides(self, client, vm_request_payload):
        response = client.post("/api/costs/estimate", json={
            "vm_sizing": vm_request_payload,
            "on_prem": {"overrides": {"cores_per_server": 32}},
        })
        assert response.status_code == 200
        assert response.json()["estimate"]["provider"] == "on_prem"

    def test_unknown_on_prem_override_is_400(self, client, vm_request_payload):
        response = client.post("/api/costs/estimate", json={
            "vm_sizing": vm_request_payload,
            "on_prem": {"overrides": {"flux_capacitors": 3}},
        })
        assert response.status_code == 400

    def test_both_sizing_blocks_is_400(self, client, k8s_request_payload, vm_request_payload):
        response = client.post("/api/costs/estimate", json={
            "sizing": k8s_request_payload,
            "vm_sizing": vm_request_payload,
            "cloud": {"provider": "aws"},
        })
        assert response.status_code == 400

    def test_missing_sizing_is_400(self, client):
        response = client.post("/api/costs/estimate", json={"cloud": {"provider": "aws"}})
        assert response.status_code == 400

    def test_missing_context_is_400(self, client, k8s_request_payload):
        response = client.post("/api/costs/estimate", json={"sizing": k8s_request_payload})
        assert response.status_code == 400

    def test_unknown_support_plan_is_422(self, client, k8s_request_payload):
        response = client.post("/api/costs/estimate", json={
            "sizing": k8s_request_payload,
            "cloud": {"provider": "aws", "support_plan": "platinum"},
        })
        assert response.status_code == 422

    def test_estimator_failure_is_400(self, client, k8s_request_payload):
        with patch("infrasizing.api.costs.CostEstimator") as mock_estimator_class:
            mock_estimator_class.return_value.estimate.side_effect = CostEstimatorError("boom")
            response = client.post("/api/costs/estimate", json={
                "sizing": k8s_request_payload,
                "cloud": {"provider": "aws"},
            })
        assert response.status_code == 400
        assert "boom" in response.json()["detail"]

    def test_compare(self, client, k8s_request_payload):
        response = client.post("/api/costs/compare", json={
            "sizing": k8s_request_payload,
            "clouds": [{"provider": "aws"}, {"provider": "hetzner"}, {"provider": "gcp"}],
            "on_prem": {},
        })
        assert response.status_code == 200

        comparison = response.json()["comparison"]
        totals = [estimate["monthly_total"] for estimate in comparison["estimates"]]
        assert totals == sorted(totals)
        assert len(totals) == 4
        assert comparison["cheapest"] == comparison["estimates"][0]["provider"]

    def test_compare_without_contexts_is_400(self, client, k8s_request_payload):
        response = client.post("/api/costs/compare", json={"sizing": k8s_request_payload})
        assert response.status_code == 400

    def test_licensed_platform_quote_only(self, client):
        response = client.post("/api/costs/licensed-platform", json={
            "application_objects": 300,
            "discount": {"type": "percentage", "scope": "license_only", "value": 10},
        })
        assert response.status_code == 200

        quote = response.json()["quote"]
        assert quote["ao_packs"] == 2
        assert quote["discount_amount"] == pytest.approx(quote["license_subtotal"] * 0.1, abs=0.01)
        assert "estimate" not in response.json()

    def test_licensed_platform_with_sizing(self, client, k8s_request_payload):
        response = client.post("/api/costs/licensed-platform", json={
            "deployment": "self_managed",
            "sizing": k8s_request_payload,
            "infrastructure": {"provider": "azure"},
        })
        assert response.status_code == 200
        assert response.json()["estimate"]["provider"] == "azure"
        assert response.json()["quote"]["infrastructure_per_year"] > 0

    def test_licensed_platform_unknown_add_on_is_422(self, client):
        response = client.post("/api/costs/licensed-platform", json={"add_ons": {"quantum_cache": 1}})
        assert response.status_code == 422

    def test_environment_licensed_quote_only(self, client):
        response = client.post("/api/costs/environment-licensed-platform", json={
            "deployment": "kubernetes",
            "environments": 10,
        })
        assert response.status_code == 200

        quote = response.json()["quote"]
        assert quote["deployment_subtotal"] == pytest.approx(6360.0 + 7 * 552.0)
        assert quote["total_three_year"] == pytest.approx(quote["total_per_year"] * 3, abs=0.05)
        assert "estimate" not in response.json()

    def test_environment_licensed_with_vm_sizing(self, client, vm_request_payload):
        response = client.post("/api/costs/environment-licensed-platform", json={
            "deployment": "server",
            "vm_sizing": vm_request_payload,
            "infrastructure": {"provider": "gcp"},
        })
        assert response.status_code == 200
        assert response.json()["estimate"]["provider"] == "gcp"
        assert response.json()["quote"]["infrastructure_per_year"] > 0

    def test_environment_licensed_unknown_pack_is_422(self, client):
        response = client.post("/api/costs/environment-licensed-platform", json={
            "deployment": "saas",
            "resource_pack_size": "XXS",
        })
        assert response.status_code == 422


class TestGrowthEndpoint:

    def test_projection_with_cost(self, client, k8s_request_payload):
        response = client.post("/api/growth/project", json={
            "sizing": k8s_request_payload,
            "growth": {"annual_growth_rate": 25, "projection_years": 4, "pattern": "compound"},
            "cloud": {"provider": "gcp"},
        })
        assert response.status_code == 200

        data = response.json()
        assert data["baseline_estimate"]["provider"] == "gcp"
        projection = data["projection"]
        assert [point["year"] for point in projection["points"]] == [1, 2, 3, 4]
        assert projection["distribution"] == "eks"
        assert projection["points"][-1]["monthly_cost"] > projection["baseline"]["monthly_cost"]

    def test_projection_without_pricing(self, client, vm_request_payload):
        response = client.post("/api/growth/project", json={"vm_sizing": vm_request_payload})
        assert response.status_code == 200
        assert response.json()["baseline_estimate"] is None

    def test_both_contexts_is_400(self, client, k8s_request_payload):
        response = client.post("/api/growth/project", json={
            "sizing": k8s_request_payload,
            "cloud": {"provider": "aws"},
            "on_prem": {},
        })
        assert response.status_code == 400

    def test_inverted_thresholds_is_400(self, client, k8s_request_payload):
        response = client.post("/api/growth/project", json={
            "sizing": k8s_request_payload,
            "growth": {"warning_threshold_percent": 95, "critical_threshold_percent": 80},
        })
        assert response.status_code == 400

    def test_horizon_validated(self, client, k8s_request_payload):
        response = client.post("/api/growth/project", json={
            "sizing": k8s_request_payload,
            "growth": {"projection_years": 9},
        })
        assert response.status_code == 422


class TestCatalogEndpoints:

    @pytest.mark.parametrize("path,key", [
        ("/api/catalog/distributions", "distributions"),
        ("/api/catalog/technologies", "technologies"),
        ("/api/catalog/providers", "providers"),
    ])
    def test_catalog(self, client, path, key):
        response = client.get(path)
        assert response.status_code == 200
        assert response.json()[key]

    def test_providers_list_regions(self, client):
        providers = client.get("/api/catalog/providers").json()["providers"]
        aws = next(provider for provider in providers if provider["key"] == "aws")
        assert "us-east-1" in aws["regions"]
