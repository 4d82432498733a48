"""Tests for the HTTP API.

The ``client`` fixture injects an offline service: reference pools, seeded
venue metrics and a steady ethereum gas snapshot.
"""

from fastapi.testclient import TestClient

from dexroute import __version__
from tests.helpers import SUSHISWAP, UNISWAP_V3


def quote_payload(venue: str = "VENUE_A", **overrides: object) -> dict:
    payload = {
        "dex": venue,
        "tokenIn": "USDC",
        "tokenOut": "ETH",
        "priceImpact": 0.1,
        "trustScore": 95,
        "liquidityUSD": 10_000_000,
        "gasCostUSD": 5,
        "executionTime": 12_000,
    }
    payload.update(overrides)
    return payload


class TestHealthAndLimits:
    def test_health(self, client: TestClient):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "version": __version__}

    def test_oversized_body_rejected(self, client: TestClient):
        body = b"x" * (1024 * 1024 + 1)
        response = client.post("/route", content=body, headers={"content-type": "application/json"})
        assert response.status_code == 413

    def test_malformed_content_length_rejected(self, client: TestClient):
        response = client.get("/health", headers={"content-length": "abc"})
        assert response.status_code == 400
        assert response.json() == {"detail": "Invalid Content-Length"}


class TestRouteEndpoint:
    def test_route_over_supplied_quotes(self, client: TestClient):
        response = client.post(
            "/route",
            json={"tokenIn": "usdc", "tokenOut": "eth", "amount": 1000, "quotes": [quote_payload()]},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["strategy"] == "single"
        assert body["steps"][0]["dex"] == "VENUE_A"
        assert body["steps"][0]["tokenIn"] == "USDC"
        assert abs(body["totalAmountOut"] - 996.003) < 1e-6
        assert body["reliabilityScore"] == 95

    def test_route_over_quote_feed(self, client: TestClient):
        response = client.post("/route", json={"tokenIn": "USDC", "tokenOut": "ETH", "amount": 50_000})
        assert response.status_code == 200
        body = response.json()
        assert body["steps"][0]["dex"] in (UNISWAP_V3, SUSHISWAP)
        assert body["totalGasCost"] > 0

    def test_options_accept_camel_case(self, client: TestClient):
        quotes = [quote_payload(trustScore=65)]
        response = client.post(
            "/route",
            json={
                "tokenIn": "USDC",
                "tokenOut": "ETH",
                "amount": 1000,
                "options": {"riskTolerance": "high"},
                "quotes": quotes,
            },
        )
        assert response.status_code == 200

    def test_no_viable_route(self, client: TestClient):
        response = client.post(
            "/route",
            json={"tokenIn": "USDC", "tokenOut": "ETH", "amount": 1000, "quotes": [quote_payload(trustScore=40)]},
        )
        assert response.status_code == 422
        detail = response.json()["detail"]
        assert "risk floor" in detail["reason"]
        assert detail["rejected"][0]["venues"] == ["VENUE_A"]
        assert detail["rejected"][0]["tokens"] == ["USDC", "ETH"]

    def test_invalid_amount(self, client: TestClient):
        response = client.post("/route", json={"tokenIn": "USDC", "tokenOut": "ETH", "amount": 0})
        assert response.status_code == 422

    def test_negative_impact_rejected(self, client: TestClient):
        response = client.post(
            "/route",
            json={"tokenIn": "USDC", "tokenOut": "ETH", "amount": 10, "quotes": [quote_payload(priceImpact=-1)]},
        )
        assert response.status_code == 422


class TestGasEndpoints:
    def test_estimate(self, client: TestClient):
        response = client.post("/gas", json={"dex": UNISWAP_V3, "route": ["USDC", "ETH"], "speed": "fast"})
        assert response.status_code == 200
        body = response.json()
        assert body["network"] == "ethereum"
        assert body["strategy"] == "eip1559_optimized"
        assert body["speed"] == "fast"
        assert body["gasLimit"] > 0
        assert body["maxFeePerGas"] is not None
        assert body["totalCostUSD"] > 0

    def test_unsupported_network(self, client: TestClient):
        response = client.post("/gas", json={"dex": "JUPITER", "network": "solana"})
        assert response.status_code == 400

    def test_all_statuses(self, client: TestClient):
        response = client.get("/gas/status")
        assert response.status_code == 200
        statuses = {s["network"]: s for s in response.json()}
        assert len(statuses) == 7
        assert statuses["ethereum"]["healthy"] is True
        assert statuses["ethereum"]["chainId"] == 1

    def test_unknown_network_status(self, client: TestClient):
        assert client.get("/gas/status/solana").status_code == 404

    def test_network_status_case_insensitive(self, client: TestClient):
        response = client.get("/gas/status/Ethereum")
        assert response.status_code == 200
        assert response.json()["baseFee"] == 20


class TestVenueEndpoints:
    def test_ranking(self, client: TestClient):
        response = client.get("/venues/ethereum")
        assert response.status_code == 200
        ranking = response.json()
        assert [r["venue"] for r in ranking] == [UNISWAP_V3, SUSHISWAP]
        assert [r["rank"] for r in ranking] == [1, 2]
        assert ranking[0]["category"] == "tier_1"

    def test_ranking_max_risk_filter(self, client: TestClient):
        response = client.get("/venues/ethereum", params={"maxRisk": "very_low"})
        assert response.status_code == 200
        assert response.json() == []

    def test_score(self, client: TestClient):
        response = client.get(f"/venues/ethereum/{UNISWAP_V3}")
        assert response.status_code == 200
        body = response.json()
        assert body["overall"] == 89
        assert body["riskLevel"] == "low"
        assert body["isDefault"] is False
        assert set(body["breakdown"]) == {"reliability", "security", "liquidity", "cost", "userExperience"}

    def test_unknown_venue_scored_conservatively(self, client: TestClient):
        body = client.get("/venues/ethereum/SHADY_DEX").json()
        assert body["overall"] == 30
        assert body["riskLevel"] == "very_high"
        assert body["isDefault"] is True


class TestRiskAndFeedback:
    def test_small_trade_proceeds(self, client: TestClient):
        response = client.get(f"/risk/ethereum/{UNISWAP_V3}", params={"tradeSize": 1000})
        assert response.status_code == 200
        body = response.json()
        assert body["tradeSize"] == 1000
        assert body["recommendation"] == "proceed"

    def test_unknown_venue_avoided(self, client: TestClient):
        body = client.get("/risk/ethereum/SHADY_DEX", params={"tradeSize": 1000}).json()
        assert body["recommendation"] == "avoid"
        assert body["riskScore"] == 80

    def test_trade_size_required(self, client: TestClient):
        assert client.get(f"/risk/ethereum/{UNISWAP_V3}").status_code == 422

    def test_feedback_applied(self, client: TestClient):
        outcome = {"successful": True, "actualSlippage": 0.2, "expectedSlippage": 0.3, "rating": 5}
        response = client.post(f"/feedback/ethereum/{UNISWAP_V3}", json=outcome)
        assert response.status_code == 200
        assert response.json() == {"venue": UNISWAP_V3, "network": "ethereum", "applied": True}

    def test_feedback_for_unknown_venue(self, client: TestClient):
        outcome = {"successful": False, "rating": 1}
        response = client.post("/feedback/ethereum/SHADY_DEX", json=outcome)
        assert response.status_code == 200
        assert response.json()["applied"] is False

    def test_feedback_rating_validated(self, client: TestClient):
        response = client.post(f"/feedback/ethereum/{UNISWAP_V3}", json={"successful": True, "rating": 9})
        assert response.status_code == 422
