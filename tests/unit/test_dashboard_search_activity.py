import uuid
from datetime import datetime, timedelta, timezone

from franchisehub.db import models
from franchisehub.utils.roles import ROLE_ADMIN, ROLE_MANAGER, ROLE_VIEWER


def test_dashboard_counts_documents_and_tickets(
    client, headers, tenant_factory, restaurant_factory, user_factory, db_session
):
    tenant = tenant_factory()
    manager = user_factory(ROLE_MANAGER, tenant=tenant)
    viewer = user_factory(ROLE_VIEWER, tenant=tenant, restaurant=restaurant_factory(tenant))
    mh, vh = headers(manager), headers(viewer)

    client.post("/documents", json={"name": "Récent", "url": "u"}, headers=mh)
    old = models.Document(name="Ancien", url="u", tenant_id=tenant.id,
                          created_at=datetime.now(timezone.utc) - timedelta(days=30))
    db_session.add(old)
    db_session.commit()

    t1 = client.post("/tickets", json={"title": "one"}, headers=vh).json()
    client.post("/tickets", json={"title": "two"}, headers=vh)
    gone = client.post("/tickets", json={"title": "three"}, headers=vh).json()
    client.put(f"/tickets/{t1['id']}/status", json={"status": "traitee"}, headers=mh)
    client.delete(f"/tickets/{gone['id']}", headers=mh)

    stats = client.get("/dashboard", headers=mh).json()
    assert stats["total_documents"] == 2
    assert stats["docs_this_week"] == 1
    assert stats["tickets_by_status"] == {"traitee": 1, "non_traitee": 1}
    days = stats["tickets_per_day"]
    assert len(days) == 7
    assert days[-1]["date"] == datetime.now(timezone.utc).date().isoformat()
    assert sum(d["count"] for d in days) == 2


def test_dashboard_is_for_managers(client, headers, tenant_factory, restaurant_factory, user_factory):
    tenant = tenant_factory()
    viewer = user_factory(ROLE_VIEWER, tenant=tenant, restaurant=restaurant_factory(tenant))
    admin = user_factory(ROLE_ADMIN)
    assert client.get("/dashboard", headers=headers(viewer)).status_code == 403
    assert client.get("/dashboard", headers=headers(admin)).status_code == 403
    assert client.get("/dashboard", params={"tenant_id": str(tenant.id)}, headers=headers(admin)).status_code == 200


def test_search_spans_kinds_and_respects_scope(client, headers, tenant_factory, restaurant_factory, user_factory):
    tenant, other = tenant_factory(), tenant_factory()
    r_a, r_b = restaurant_factory(tenant, name="Alpha"), restaurant_factory(tenant, name="Beta")
    manager = user_factory(ROLE_MANAGER, tenant=tenant)
    viewer_a = user_factory(ROLE_VIEWER, tenant=tenant, restaurant=r_a)
    viewer_b = user_factory(ROLE_VIEWER, tenant=tenant, restaurant=r_b)
    outsider = user_factory(ROLE_MANAGER, tenant=other)
    mh = headers(manager)

    client.post("/documents", json={"name": "Procédure friteuse", "url": "u"}, headers=mh)
    client.post("/announcements", json={"title": "Friteuse neuve", "content": "Livraison lundi"}, headers=mh)
    client.post("/tickets", json={"title": "Panne", "description": "La friteuse ne chauffe plus " * 10},
                headers=headers(viewer_a))
    client.post("/tickets", json={"title": "Friteuse B"}, headers=headers(viewer_b))
    client.post("/documents", json={"name": "Friteuse ailleurs", "url": "u"}, headers=headers(outsider))

    res = client.get("/search", params={"q": "FRITEUSE"}, headers=mh).json()
    assert len(res["documents"]) == 1
    assert len(res["announcements"]) == 1
    assert len(res["tickets"]) == 2
    assert res["total"] == 4
    long_ticket = next(t for t in res["tickets"] if t["title"] == "Panne")
    assert len(long_ticket["description"]) == 100
    assert long_ticket["restaurant_name"] == "Alpha"

    viewer_res = client.get("/search", params={"q": "friteuse"}, headers=headers(viewer_a)).json()
    assert [t["title"] for t in viewer_res["tickets"]] == ["Panne"]

    assert client.get("/search", params={"q": "f"}, headers=mh).status_code == 422


def test_activity_logs_are_tenant_scoped_and_filterable(client, headers, user_factory, db_session):
    admin = user_factory(ROLE_ADMIN)
    ah = headers(admin)
    t1 = client.post("/tenants", json={"name": "One"}, headers=ah).json()
    t2 = client.post("/tenants", json={"name": "Two"}, headers=ah).json()
    client.patch(f"/tenants/{t1['id']}", json={"name": "One bis"}, headers=ah)

    everything = client.get("/activity-logs", headers=ah).json()
    assert len(everything) == 3
    creates = client.get("/activity-logs", params={"action_type": "tenant_create"}, headers=ah).json()
    assert {log["target_id"] for log in creates} == {t1["id"], t2["id"]}
    update = client.get("/activity-logs", params={"action_type": "tenant_update"}, headers=ah).json()
    assert update[0]["metadata"] == {"fields": ["name"]}

    manager = user_factory(ROLE_MANAGER, tenant=db_session.get(models.Tenant, uuid.UUID(t2["id"])))
    own = client.get("/activity-logs", params={"tenant_id": t1["id"]}, headers=headers(manager)).json()
    assert [log["tenant_id"] for log in own] == [t2["id"]]

    paged = client.get("/activity-logs", params={"limit": 1, "offset": 1}, headers=ah).json()
    assert len(paged) == 1



def test_search_treats_wildcards_literally(client, headers, tenant_factory, user_factory):
    mh = headers(user_factory(ROLE_MANAGER, tenant=tenant_factory()))
    client.post("/documents", json={"name": "Remise 50% midi", "url": "u"}, headers=mh)
    client.post("/documents", json={"name": "Lot 500 serviettes", "url": "u"}, headers=mh)

    assert client.get("/search", params={"q": "%%"}, headers=mh).json()["total"] == 0
    assert client.get("/search", params={"q": "t_5"}, headers=mh).json()["total"] == 0
    literal = client.get("/search", params={"q": "50%"}, headers=mh).json()
    assert [d["title"] for d in literal["documents"]] == ["Remise 50% midi"]
