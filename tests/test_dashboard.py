"""Dashboard aggregates."""


async def test_stats_counts_by_status(api, seed, make_property, make_inspection):
    prop = await make_property(seed.company_a)
    await make_property(seed.company_a, status="sold")
    await make_property(seed.company_b)
    await make_inspection(prop, seed.users["inspector"])

    resp = await api.get("/api/v1/dashboard/stats", params={"period": "7d"}, headers=seed.headers("manager"))

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["properties"]["total"] == 2
    assert data["properties"]["active"] == 1
    assert data["properties"]["by_status"] == {"active": 1, "sold": 1}
    assert data["inspections"]["by_status"] == {"pending": 1}
    assert data["users"]["by_role"]["inspector"] == 2


async def test_viewer_gets_no_user_stats(api, seed):
    resp = await api.get("/api/v1/dashboard/stats", headers=seed.headers("viewer"))

    assert resp.status_code == 200
    assert "users" not in resp.json()["data"]


async def test_recent_activity_is_newest_first(api, seed, make_property, make_inspection):
    for _ in range(3):
        await make_inspection(await make_property(seed.company_a), seed.users["inspector"])

    resp = await api.get("/api/v1/dashboard/recent-activity", params={"limit": 2}, headers=seed.headers("viewer"))

    data = resp.json()["data"]
    assert data["total"] == 2
    stamps = [a["created_at"] for a in data["activities"]]
    assert stamps == sorted(stamps, reverse=True)
    assert {a["type"] for a in data["activities"]} == {"inspection"}
