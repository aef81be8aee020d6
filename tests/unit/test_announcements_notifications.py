import pytest

from franchisehub.db import models
from franchisehub.services.notification_service import NotificationService
from franchisehub.utils.roles import ROLE_ADMIN, ROLE_MANAGER, ROLE_VIEWER


@pytest.fixture
def network(tenant_factory, restaurant_factory, user_factory):
    tenant = tenant_factory()
    resto_a = restaurant_factory(tenant, name="A")
    resto_b = restaurant_factory(tenant, name="B")
    return {
        "tenant": tenant,
        "manager": user_factory(ROLE_MANAGER, tenant=tenant),
        "viewer_a": user_factory(ROLE_VIEWER, tenant=tenant, restaurant=resto_a),
        "viewer_b": user_factory(ROLE_VIEWER, tenant=tenant, restaurant=resto_b),
        "resto_a": resto_a,
        "resto_b": resto_b,
    }


def test_tenant_wide_announcement_reaches_all_viewers(client, headers, network, db_session):
    r = client.post(
        "/announcements", json={"title": "Fermeture", "content": "Le 15 août"}, headers=headers(network["manager"])
    )
    assert r.status_code == 201
    ann = r.json()
    assert ann["restaurants"] == []

    recipients = {n.user_id for n in db_session.query(models.Notification).all()}
    assert recipients == {network["viewer_a"].id, network["viewer_b"].id}

    for viewer in ("viewer_a", "viewer_b"):
        listed = client.get("/announcements", headers=headers(network[viewer])).json()
        assert [a["id"] for a in listed] == [ann["id"]]


def test_targeted_announcement_is_restricted(client, headers, network, db_session):
    r = client.post(
        "/announcements",
        json={"title": "Promo", "content": "Menu d'été", "restaurant_ids": [str(network["resto_a"].id)]},
        headers=headers(network["manager"]),
    )
    ann = r.json()
    assert [x["id"] for x in ann["restaurants"]] == [str(network["resto_a"].id)]

    recipients = {n.user_id for n in db_session.query(models.Notification).all()}
    assert recipients == {network["viewer_a"].id}
    assert [a["id"] for a in client.get("/announcements", headers=headers(network["viewer_a"])).json()] == [ann["id"]]
    assert client.get("/announcements", headers=headers(network["viewer_b"])).json() == []


def test_announcement_rejects_foreign_restaurant(client, headers, network, tenant_factory, restaurant_factory):
    foreign = restaurant_factory(tenant_factory())
    r = client.post(
        "/announcements",
        json={"title": "x", "content": "y", "restaurant_ids": [str(foreign.id)]},
        headers=headers(network["manager"]),
    )
    assert r.status_code == 400


def test_announcement_links_documents(client, headers, network):
    mh = headers(network["manager"])
    doc = client.post("/documents", json={"name": "Carte été", "url": "u"}, headers=mh).json()
    ann = client.post(
        "/announcements", json={"title": "Carte", "content": "Nouvelle carte", "document_ids": [doc["id"]]}, headers=mh
    ).json()
    assert [d["id"] for d in ann["documents"]] == [doc["id"]]


def test_mark_as_read_records_view_and_stats(client, headers, network, db_session):
    mh = headers(network["manager"])
    ann = client.post("/announcements", json={"title": "Info", "content": "..."}, headers=mh).json()
    vh = headers(network["viewer_a"])

    assert client.get("/notifications/unread-counts", headers=vh).json()["announcements"] == 1
    for _ in range(2):
        assert client.post(f"/announcements/{ann['id']}/mark-as-read", headers=vh).json()["success"] is True
    assert client.get("/notifications/unread-counts", headers=vh).json()["announcements"] == 0

    views = client.get(f"/announcements/{ann['id']}/views", headers=mh).json()
    assert [v["email"] for v in views] == [network["viewer_a"].email]

    stats = client.get(f"/announcements/{ann['id']}/view-stats", headers=mh).json()
    assert stats == {"total_views": 1, "total_users": 2, "percentage": 50}

    assert client.get(f"/announcements/{ann['id']}/views", headers=vh).status_code == 403


def test_view_stats_only_count_the_viewer_audience(client, headers, network):
    mh = headers(network["manager"])
    ann = client.post(
        "/announcements",
        json={"title": "Promo", "content": "...", "restaurant_ids": [str(network["resto_a"].id)]},
        headers=mh,
    ).json()
    for reader in ("manager", "viewer_a"):
        client.post(f"/announcements/{ann['id']}/mark-as-read", headers=headers(network[reader]))

    stats = client.get(f"/announcements/{ann['id']}/view-stats", headers=mh).json()
    assert stats == {"total_views": 1, "total_users": 1, "percentage": 100}


def test_deleted_announcement_disappears(client, headers, network):
    mh = headers(network["manager"])
    ann = client.post("/announcements", json={"title": "Old", "content": "..."}, headers=mh).json()
    assert client.delete(f"/announcements/{ann['id']}", headers=mh).status_code == 204
    assert client.get("/announcements", headers=mh).json() == []
    assert client.post(f"/announcements/{ann['id']}/mark-as-read", headers=mh).status_code == 404


def test_notification_listing_is_paginated(client, headers, network, db_session):
    service = NotificationService(db_session)
    viewer = network["viewer_a"]
    for i in range(3):
        service.notify_user(viewer.id, network["tenant"].id, models.NotificationType.DOCUMENT_UPLOADED,
                            network["resto_a"].id, f"doc {i}")

    page = client.get("/notifications", params={"page": 1, "limit": 2}, headers=headers(viewer)).json()
    assert page["total"] == 3
    assert page["total_pages"] == 2
    assert len(page["notifications"]) == 2
    last = client.get("/notifications", params={"page": 2, "limit": 2}, headers=headers(viewer)).json()
    assert len(last["notifications"]) == 1


def test_mark_all_and_category_read(client, headers, network, db_session):
    service = NotificationService(db_session)
    viewer = network["viewer_a"]
    tid = network["tenant"].id
    service.notify_user(viewer.id, tid, models.NotificationType.DOCUMENT_UPLOADED, viewer.id, "d")
    service.notify_user(viewer.id, tid, models.NotificationType.TICKET_CREATED, viewer.id, "t1")
    service.notify_user(viewer.id, tid, models.NotificationType.TICKET_COMMENTED, viewer.id, "t2")
    vh = headers(viewer)

    assert client.get("/notifications/unread-counts", headers=vh).json() == {
        "documents": 1, "announcements": 0, "tickets": 2,
    }
    client.post("/notifications/mark-all-read", json={"notification_type": "ticket_created"}, headers=vh)
    assert client.get("/notifications/unread-counts", headers=vh).json()["tickets"] == 1
    client.post("/notifications/mark-category-read", json={"category": "tickets"}, headers=vh)
    assert client.get("/notifications/unread-counts", headers=vh).json()["tickets"] == 0

    bad = client.post("/notifications/mark-category-read", json={"category": "nope"}, headers=vh)
    assert bad.status_code == 422


def test_record_view_is_idempotent_and_clears_target(client, headers, network, db_session):
    mh = headers(network["manager"])
    doc = client.post("/documents", json={"name": "Procédure", "url": "u"}, headers=mh).json()
    vh = headers(network["viewer_a"])
    assert client.get("/notifications/unread-counts", headers=vh).json()["documents"] == 1

    payload = {"target_type": "document", "target_id": doc["id"]}
    first = client.post("/notifications/views", json=payload, headers=vh).json()
    second = client.post("/notifications/views", json=payload, headers=vh).json()
    assert first["id"] == second["id"]
    assert client.get("/notifications/unread-counts", headers=vh).json()["documents"] == 0

    page = client.get(f"/notifications/views/document/{doc['id']}", headers=mh).json()
    assert page["total"] == 1
    assert page["views"][0]["user_id"] == str(network["viewer_a"].id)


def test_cleanup_manager_announcement_notifications(client, headers, network, user_factory, db_session):
    service = NotificationService(db_session)
    tid = network["tenant"].id
    manager = network["manager"]
    viewer = network["viewer_a"]
    service.notify_user(manager.id, tid, models.NotificationType.ANNOUNCEMENT_POSTED, tid, "a")
    service.notify_user(manager.id, tid, models.NotificationType.TICKET_CREATED, tid, "t")
    service.notify_user(viewer.id, tid, models.NotificationType.ANNOUNCEMENT_POSTED, tid, "a")

    admin = user_factory(ROLE_ADMIN)
    assert client.post("/notifications/cleanup-manager-announcements", headers=headers(manager)).status_code == 403
    r = client.post("/notifications/cleanup-manager-announcements", headers=headers(admin))
    assert r.json() == {"deleted": 1}
    remaining = {(n.user_id, n.type) for n in db_session.query(models.Notification).all()}
    assert remaining == {(manager.id, "ticket_created"), (viewer.id, "announcement_posted")}


def test_fan_out_skips_inactive_users(network, user_factory, db_session):
    service = NotificationService(db_session)
    tenant = network["tenant"]
    user_factory(ROLE_VIEWER, tenant=tenant, restaurant=network["resto_a"], is_active=False)
    user_factory(ROLE_MANAGER, tenant=tenant, is_active=False)

    assert {u.id for u in service.get_viewers(tenant.id)} == {network["viewer_a"].id, network["viewer_b"].id}
    assert [u.id for u in service.get_viewers(tenant.id, [network["resto_b"].id])] == [network["viewer_b"].id]
    sent = service.notify_managers(tenant.id, models.NotificationType.TICKET_CREATED, tenant.id, "t")
    assert sent == 1
    assert service.notify_tenant(tenant.id, models.NotificationType.DOCUMENT_UPLOADED, tenant.id, "d") == 3
