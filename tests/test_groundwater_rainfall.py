from datetime import date, timedelta
from uuid import uuid4

import pytest

from app.models import AlertType, ThresholdOperator
from app.services.rainfall import drought_risk, flood_risk, season_for_month
from app.utils.time import utcnow


@pytest.mark.parametrize(
    ("month", "season"),
    [(1, "winter"), (3, "summer"), (5, "summer"), (6, "monsoon"), (9, "monsoon"), (10, "winter"), (12, "winter")],
)
def test_season_for_month(month, season):
    assert season_for_month(month) == season


def test_risk_bands():
    assert drought_risk(5) == "high"
    assert drought_risk(10) == "medium"
    assert drought_risk(25) == "low"
    assert flood_risk(101) == "high"
    assert flood_risk(100) == "medium"
    assert flood_risk(50) == "low"


@pytest.mark.anyio
async def test_current_depth_and_history(client, operator_headers, viewer_headers, make_well):
    well = make_well()

    empty = (await client.get(f"/groundwater/wells/{well.id}/depth", headers=viewer_headers)).json()
    assert empty["depth"] is None
    assert empty["message"] == "No depth data available"

    for depth, timestamp in ((12.4, "2026-04-01T00:00:00Z"), (14.1, "2026-05-01T00:00:00Z")):
        resp = await client.post(
            "/groundwater/depths",
            json={"well_id": well.id, "depth": depth, "season": "pre-monsoon", "timestamp": timestamp},
            headers=operator_headers,
        )
        assert resp.status_code == 201

    current = (await client.get(f"/groundwater/wells/{well.id}/depth", headers=viewer_headers)).json()
    assert current["depth"] == 14.1
    assert current["season"] == "pre-monsoon"

    history = (await client.get(f"/groundwater/wells/{well.id}/depth/history", headers=viewer_headers)).json()
    assert [item["depth"] for item in history] == [14.1, 12.4]


@pytest.mark.anyio
async def test_regional_depths_and_heatmap(client, operator_headers, viewer_headers, make_well):
    region = f"Region-{uuid4().hex[:6]}"
    measured = make_well(name="A well", region=region)
    unmeasured = make_well(name="B well", region=region)
    await client.post("/groundwater/depths", json={"well_id": measured.id, "depth": 8.0}, headers=operator_headers)
    await client.post("/groundwater/depths", json={"well_id": measured.id, "depth": 9.5}, headers=operator_headers)

    regional = (await client.get(f"/groundwater/regions/{region}", headers=viewer_headers)).json()
    by_id = {item["well"]["id"]: item for item in regional}
    assert by_id[measured.id]["latest_depth"]["depth"] == 9.5
    assert by_id[unmeasured.id]["latest_depth"] is None

    heatmap = (await client.get("/groundwater/heatmap", params={"region": region}, headers=viewer_headers)).json()
    points = {point["id"]: point for point in heatmap}
    assert set(points) == {measured.id, unmeasured.id}
    assert points[measured.id]["depth"] == 9.5
    assert points[measured.id]["location"] == {"lat": 17.4, "lng": 78.5}
    assert points[unmeasured.id]["depth"] is None


@pytest.mark.anyio
async def test_depth_reading_opens_low_water_alert(client, operator_headers, make_well, make_user, make_configuration):
    well = make_well()
    make_configuration(
        make_user(),
        entity_type=AlertType.GROUNDWATER,
        entity_id=str(well.id),
        operator=ThresholdOperator.GT,
        threshold=20.0,
    )

    resp = await client.post("/groundwater/depths", json={"well_id": well.id, "depth": 31.0}, headers=operator_headers)
    body = resp.json()
    assert len(body["alerts"]) == 1
    assert body["alerts"][0]["severity"] == "critical"
    # Wells have no name lookup; the id stands in.
    assert body["alerts"][0]["entity_name"] == str(well.id)


@pytest.mark.anyio
async def test_missing_well_returns_404(client, viewer_headers):
    resp = await client.get("/groundwater/wells/999999", headers=viewer_headers)
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "WELL_NOT_FOUND"


@pytest.mark.anyio
async def test_rainfall_duplicate_day_conflicts(client, operator_headers, make_rain_station):
    station = make_rain_station()
    payload = {"station_id": station.id, "rainfall": 12.5, "date": "2026-07-14"}

    first = await client.post("/rainfall/readings", json=payload, headers=operator_headers)
    assert first.status_code == 201
    assert first.json()["reading"]["date"] == "2026-07-14"

    second = await client.post("/rainfall/readings", json={**payload, "rainfall": 30}, headers=operator_headers)
    assert second.status_code == 409
    error = second.json()["error"]
    assert error["code"] == "RAINFALL_READING_EXISTS"
    assert error["details"] == {"station_id": station.id, "date": "2026-07-14"}


@pytest.mark.anyio
async def test_rainfall_negative_total_is_rejected(client, operator_headers, make_rain_station):
    station = make_rain_station()
    resp = await client.post(
        "/rainfall/readings",
        json={"station_id": station.id, "rainfall": -1, "date": "2026-07-14"},
        headers=operator_headers,
    )
    assert resp.status_code == 422


@pytest.mark.anyio
async def test_rainfall_history_and_seasonal_analysis(client, operator_headers, viewer_headers, make_rain_station):
    station = make_rain_station()
    readings = [("2025-04-10", 10.0), ("2025-07-01", 80.25), ("2025-07-02", 19.75), ("2025-12-20", 3.0)]
    for day, rainfall in readings:
        await client.post(
            "/rainfall/readings",
            json={"station_id": station.id, "rainfall": rainfall, "date": day},
            headers=operator_headers,
        )

    history = (
        await client.get(
            f"/rainfall/stations/{station.id}/history",
            params={"start_date": "2025-07-01", "end_date": "2025-07-31"},
            headers=viewer_headers,
        )
    ).json()
    assert [item["date"] for item in history] == ["2025-07-02", "2025-07-01"]

    analysis = (
        await client.get(f"/rainfall/stations/{station.id}/seasonal", params={"year": 2025}, headers=viewer_headers)
    ).json()
    assert analysis["year"] == 2025
    assert analysis["seasonal"]["monsoon"] == {"total": 100.0, "days": 2, "average": 50.0}
    assert analysis["seasonal"]["summer"] == {"total": 10.0, "days": 1, "average": 10.0}
    assert analysis["seasonal"]["winter"] == {"total": 3.0, "days": 1, "average": 3.0}


@pytest.mark.anyio
async def test_rainfall_risk_indicators_for_region(client, operator_headers, viewer_headers, make_rain_station):
    region = f"Region-{uuid4().hex[:6]}"
    station = make_rain_station(region=region)
    today = utcnow().date()
    for offset, rainfall in ((0, 120.0), (1, 90.0)):
        day = (today - timedelta(days=offset)).isoformat()
        await client.post(
            "/rainfall/readings",
            json={"station_id": station.id, "rainfall": rainfall, "date": day},
            headers=operator_headers,
        )

    indicators = (
        await client.get("/rainfall/risk-indicators", params={"region": region}, headers=viewer_headers)
    ).json()
    assert indicators == {
        "region": region,
        "average_rainfall": 105.0,
        "drought_risk": "low",
        "flood_risk": "high",
        "period_days": 30,
    }


@pytest.mark.anyio
async def test_rainfall_risk_indicators_without_data(client, viewer_headers):
    indicators = (
        await client.get("/rainfall/risk-indicators", params={"region": f"Nowhere-{uuid4().hex[:6]}"}, headers=viewer_headers)
    ).json()
    assert indicators["average_rainfall"] == 0.0
    assert indicators["drought_risk"] == "high"
    assert indicators["flood_risk"] == "low"


@pytest.mark.anyio
async def test_rainfall_reading_triggers_alert(client, operator_headers, make_rain_station, make_user, make_configuration):
    station = make_rain_station()
    make_configuration(make_user(), entity_type=AlertType.RAINFALL, entity_id=str(station.id), threshold=100.0)

    resp = await client.post(
        "/rainfall/readings",
        json={"station_id": station.id, "rainfall": 130.0, "date": date(2026, 8, 1).isoformat()},
        headers=operator_headers,
    )
    alerts = resp.json()["alerts"]
    assert len(alerts) == 1
    assert alerts[0]["severity"] == "warning"
    assert alerts[0]["message"] == "rainfall value exceeded threshold: 130 (threshold: 100)"
