import pytest

from franchisehub.db import models
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
    }


def _open_ticket(client, headers, viewer, title="Frigo en panne"):
    r = client.post("/tickets", json={"title": title, "description": "Depuis ce matin"}, headers=headers(viewer))
    assert r.status_code == 201, r.text
    return r.json()


def test_viewer_opens_ticket_and_managers_are_notified(client, headers, network, db_session):
    ticket = _open_ticket(client, headers, network["viewer_a"])
    assert ticket["status"] == "non_traitee"
    assert ticket["restaurant_id"] == str(network["resto_a"].id)

    notes = db_session.query(models.Notification).all()
    assert [(n.user_id, n.type) for n in notes] == [(network["manager"].id, "ticket_created")]


def test_only_restaurant_users_open_tickets(client, headers, network, user_factory):
    r = client.post("/tickets", json={"title": "x"}, headers=headers(network["manager"]))
    assert r.status_code == 403
    floating = user_factory(ROLE_VIEWER, tenant=network["tenant"])
    assert client.post("/tickets", json={"title": "x"}, headers=headers(floating)).status_code == 403


def test_viewers_only_see_their_restaurant(client, headers, network):
    t_a = _open_ticket(client, headers, network["viewer_a"], "A1")
    t_b = _open_ticket(client, headers, network["viewer_b"], "B1")

    assert [t["id"] for t in client.get("/tickets", headers=headers(network["viewer_a"])).json()] == [t_a["id"]]
    assert {t["id"] for t in client.get("/tickets", headers=headers(network["manager"])).json()} == {t_a["id"], t_b["id"]}
    assert client.get(f"/tickets/{t_b['id']}", headers=headers(network["viewer_a"])).status_code == 403


def test_other_tenant_cannot_see_ticket(client, headers, network, tenant_factory, user_factory):
    ticket = _open_ticket(client, headers, network["viewer_a"])
    outsider = user_factory(ROLE_MANAGER, tenant=tenant_factory())
    assert client.get(f"/tickets/{ticket['id']}", headers=headers(outsider)).status_code == 403
    assert client.put(
        f"/tickets/{ticket['id']}/status", json={"status": "en_cours"}, headers=headers(outsider)
    ).status_code == 403


def test_status_update_notifies_creator(client, headers, network, db_session):
    ticket = _open_ticket(client, headers, network["viewer_a"])
    r = client.put(f"/tickets/{ticket['id']}/status", json={"status": "en_cours"}, headers=headers(network["manager"]))
    assert r.status_code == 200
    assert r.json()["status"] == "en_cours"

    assert client.put(
        f"/tickets/{ticket['id']}/status", json={"status": "bogus"}, headers=headers(network["manager"])
    ).status_code == 422

    types = [
        n.type for n in db_session.query(models.Notification)
        .filter(models.Notification.user_id == network["viewer_a"].id)
    ]
    assert types == ["ticket_status_updated"]


def test_comments_route_notifications_by_author_role(client, headers, network, db_session):
    ticket = _open_ticket(client, headers, network["viewer_a"])
    db_session.query(models.Notification).delete()
    db_session.commit()

    r = client.post(f"/tickets/{ticket['id']}/comments", json={"message": "Toujours en panne"},
                    headers=headers(network["viewer_a"]))
    assert r.status_code == 201
    r = client.post(f"/tickets/{ticket['id']}/comments", json={"message": "Technicien demain"},
                    headers=headers(network["manager"]))
    assert r.status_code == 201

    notes = {(n.user_id, n.type) for n in db_session.query(models.Notification).all()}
    assert notes == {
        (network["manager"].id, "ticket_commented"),
        (network["viewer_a"].id, "ticket_commented"),
    }

    detail = client.get(f"/tickets/{ticket['id']}", headers=headers(network["viewer_a"])).json()
    assert [c["message"] for c in detail["comments"]] == ["Toujours en panne", "Technicien demain"]


def test_attachments_on_ticket_and_comment(client, headers, network):
    ticket = _open_ticket(client, headers, network["viewer_a"])
    h = headers(network["viewer_a"])
    comment = client.post(f"/tickets/{ticket['id']}/comments", json={"message": "photo"}, headers=h).json()

    att = {"filename": "frigo.jpg", "url": "https://files.example.com/frigo.jpg", "mime_type": "image/jpeg", "file_size": 1024}
    r = client.post(f"/tickets/{ticket['id']}/attachments", json=att, headers=h)
    assert r.status_code == 201
    assert r.json()["ticket_id"] == ticket["id"]

    r = client.post(f"/tickets/{ticket['id']}/attachments", json={**att, "comment_id": comment["id"]}, headers=h)
    assert r.status_code == 201
    assert r.json()["comment_id"] == comment["id"]
    assert r.json()["ticket_id"] is None

    detail = client.get(f"/tickets/{ticket['id']}", headers=h).json()
    assert len(detail["attachments"]) == 1


def test_delete_and_bulk_delete_are_soft(client, headers, network, db_session, user_factory):
    t1 = _open_ticket(client, headers, network["viewer_a"], "one")
    _open_ticket(client, headers, network["viewer_a"], "two")
    _open_ticket(client, headers, network["viewer_b"], "three")
    mh = headers(network["manager"])

    assert client.delete(f"/tickets/{t1['id']}", headers=mh).status_code == 204
    assert client.get(f"/tickets/{t1['id']}", headers=mh).status_code == 404
    assert len(client.get("/tickets", headers=mh).json()) == 2

    assert client.delete("/tickets", headers=headers(network["viewer_a"])).status_code == 403
    r = client.delete("/tickets", headers=mh)
    assert r.json() == {"deleted": 2}
    assert client.get("/tickets", headers=mh).json() == []
    assert db_session.query(models.Ticket).filter(models.Ticket.status == "supprime").count() == 3

    admin = user_factory(ROLE_ADMIN)
    assert client.get("/tickets", headers=headers(admin)).json() == []
