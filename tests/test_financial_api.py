import pytest
from httpx import AsyncClient, ASGITransport

from app.api.financial import enforce_rate_limit, get_rate_limiter, get_text_generator
from app.main import app
from app.services.explanation_service import fallback_explanation
from app.utils.rate_limit import SlidingWindowRateLimiter

METRICS = {
    "omzet": 1_000_000,
    "nettowinst": 80_000,
    "eigenVermogen": 1_000_000,
    "vlottendeActiva": 300_000,
    "kortlopendeSchulden": 200_000,
    "totaalActiva": 2_500_000,
}

CSV_CONTENT = """jaar,omzet,nettowinst,eigen vermogen,vlottende activa,kortlopende schulden,totaal activa
2022,"€ 900,000",60000,950000,280000,210000,2400000
2023,"€ 1,000,000",80000,1000000,300000,200000,2500000
"""


async def unavailable_generator(prompt: str) -> str:
    raise RuntimeError("503 Service Unavailable")


async def echo_generator(prompt: str) -> str:
    return "Heldere uitleg."


@pytest.fixture
def client_overrides():
    app.dependency_overrides[enforce_rate_limit] = lambda: None
    app.dependency_overrides[get_text_generator] = lambda: echo_generator
    yield app.dependency_overrides
    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_root():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/")
    assert response.status_code == 200
    assert "message" in response.json()


@pytest.mark.asyncio
async def test_parse_fin_csv(client_overrides):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post("/api/parse-fin", json={
            "fileData": CSV_CONTENT, "fileName": "jaarcijfers.csv", "fileType": "text/csv",
        })
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["fileName"] == "jaarcijfers.csv"
    assert body["metrics"] == {
        "omzet": 1000000.0,
        "nettowinst": 80000.0,
        "eigenVermogen": 1000000.0,
        "vlottendeActiva": 300000.0,
        "kortlopendeSchulden": 200000.0,
        "totaalActiva": 2500000.0,
    }
    assert body["summary"]["totalRows"] == 2
    assert body["summary"]["totalColumns"] == 7
    assert set(body["summary"]["matchedFields"]) == set(METRICS)
    assert len(body["rawData"]) == 2


@pytest.mark.asyncio
async def test_parse_fin_rejects_unsupported_file(client_overrides):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post("/api/parse-fin", json={"fileData": "x", "fileName": "notities.txt"})
    assert response.status_code == 400
    assert "Niet ondersteund" in response.json()["detail"]


@pytest.mark.asyncio
async def test_parse_fin_rejects_empty_csv(client_overrides):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post("/api/parse-fin", json={"fileData": "omzet\n", "fileName": "leeg.csv"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_parse_fin_rate_limited():
    limiter = SlidingWindowRateLimiter(limit=1, window_seconds=60)
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    try:
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            payload = {"fileData": CSV_CONTENT, "fileName": "jaarcijfers.csv"}
            first = await client.post("/api/parse-fin", json=payload)
            second = await client.post("/api/parse-fin", json=payload)
            other_client = await client.post("/api/parse-fin", json=payload, headers={"X-Forwarded-For": "10.0.0.9"})
    finally:
        app.dependency_overrides.clear()

    assert first.status_code == 200
    assert second.status_code == 429
    assert second.json()["detail"] == "Te veel aanvragen, probeer in 1 minuut opnieuw."
    assert other_client.status_code == 200


@pytest.mark.asyncio
async def test_fin_analysis(client_overrides):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post("/api/fin-analysis", json={"metrics": METRICS})
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["ratios"]["rentabiliteit"]["value"] == 8.0
    assert body["ratios"]["liquiditeit"]["value"] == 1.5
    assert body["ratios"]["solvabiliteit"]["value"] == 40.0
    assert body["ratios"]["solvabiliteit"]["benchmarkRange"] == {"min": 0.2, "max": 0.6, "ideal": 0.35}
    assert body["ratios"]["summary"] == {
        "totalRatios": 3, "healthyRatios": 3, "warningRatios": 0, "criticalRatios": 0,
    }
    assert body["summary"]["overallHealth"] == "healthy"
    assert [e["uitleg"] for e in body["explanations"]] == ["Heldere uitleg."] * 3


@pytest.mark.asyncio
async def test_fin_analysis_degrades_when_text_service_fails(client_overrides):
    client_overrides[get_text_generator] = lambda: unavailable_generator
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post("/api/fin-analysis", json={"metrics": METRICS})
    assert response.status_code == 200
    explanations = response.json()["explanations"]
    assert explanations == [
        {"ratio": "Rentabiliteit (ROE)", "waarde": "8%",
         "uitleg": fallback_explanation("Rentabiliteit (ROE)", "8%")},
        {"ratio": "Liquiditeit (Current Ratio)", "waarde": "1.5",
         "uitleg": fallback_explanation("Liquiditeit (Current Ratio)", "1.5")},
        {"ratio": "Solvabiliteit (Equity Ratio)", "waarde": "40%",
         "uitleg": fallback_explanation("Solvabiliteit (Equity Ratio)", "40%")},
    ]


@pytest.mark.asyncio
async def test_fin_analysis_with_partial_metrics(client_overrides):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post("/api/fin-analysis", json={"metrics": {"vlottendeActiva": 500, "kortlopendeSchulden": 1000}})
    assert response.status_code == 200
    body = response.json()
    assert body["ratios"]["rentabiliteit"]["value"] is None
    assert body["ratios"]["rentabiliteit"]["isHealthy"] is None
    assert body["summary"] == {"overallHealth": "warning", "keyInsights": ["1 ratio's vereisen aandacht"]}


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [{}, {"metrics": None}, {"metrics": "geen object"}, {"metrics": [1, 2]}, {"metrics": {"omzet": "veel"}}])
async def test_fin_analysis_rejects_bad_metrics(client_overrides, payload):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post("/api/fin-analysis", json=payload)
    assert response.status_code == 400
