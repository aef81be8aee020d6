import uuid

from franchisehub.db import models
from franchisehub.utils.roles import ROLE_ADMIN, ROLE_MANAGER, ROLE_VIEWER


def test_admin_creates_and_lists_tenants(client, user_factory, headers, db_session):
    admin = user_factory(ROLE_ADMIN)
    r = client.post(
        "/tenants",
        json={"name": "Pizza Co", "restaurant_type": "pizzeria", "primary_color": "#112233"},
        headers=headers(admin),
    )
    assert r.status_code == 201
    body = r.json()
    assert body["name"] == "Pizza Co"
    assert body["restaurant_type"] == "pizzeria"
    assert body["secondary_color"] == "#10B981"

    listed = client.get("/tenants", headers=headers(admin)).json()
    assert [t["id"] for t in listed] == [body["id"]]

    log = db_session.query(models.ActivityLog).filter(models.ActivityLog.action_type == "tenant_create").one()
    assert str(log.target_id) == body["id"]


def test_tenant_validation_rejects_bad_colors(client, user_factory, headers):
    admin = user_factory(ROLE_ADMIN)
    r = client.post("/tenants", json={"name": "X", "primary_color": "red"}, headers=headers(admin))
    assert r.status_code == 422


def test_manager_reads_and_updates_only_own_tenant(client, tenant_factory, user_factory, headers):
    mine, other = tenant_factory("Mine"), tenant_factory("Other")
    manager = user_factory(ROLE_MANAGER, tenant=mine)

    assert client.get(f"/tenants/{mine.id}", headers=headers(manager)).status_code == 200
    assert client.get(f"/tenants/{other.id}", headers=headers(manager)).status_code == 403

    r = client.patch(f"/tenants/{mine.id}", json={"name": "Renamed"}, headers=headers(manager))
    assert r.status_code == 200
    assert r.json()["name"] == "Renamed"
    assert client.patch(f"/tenants/{other.id}", json={"name": "Hijack"}, headers=headers(manager)).status_code == 403


def test_update_unknown_tenant_is_404(client, user_factory, headers):
    admin = user_factory(ROLE_ADMIN)
    assert client.patch(f"/tenants/{uuid.uuid4()}", json={"name": "x"}, headers=headers(admin)).status_code == 404


def test_admin_creates_user_and_rejects_duplicates(client, tenant_factory, restaurant_factory, user_factory, headers):
    admin = user_factory(ROLE_ADMIN)
    tenant = tenant_factory()
    resto = restaurant_factory(tenant)
    payload = {
        "email": "New.Viewer@Example.com",
        "password": "secret123",
        "role": "viewer",
        "tenant_id": str(tenant.id),
        "restaurant_id": str(resto.id),
    }
    r = client.post("/users", json=payload, headers=headers(admin))
    assert r.status_code == 201
    assert r.json()["email"] == "new.viewer@example.com"
    assert r.json()["role"] == ROLE_VIEWER
    assert "password_hash" not in r.json()

    assert client.post("/users", json=payload, headers=headers(admin)).status_code == 409


def test_create_user_with_foreign_restaurant_is_rejected(client, tenant_factory, restaurant_factory, user_factory, headers):
    admin = user_factory(ROLE_ADMIN)
    tenant, other = tenant_factory(), tenant_factory()
    payload = {
        "email": "x@example.com",
        "password": "secret123",
        "role": "viewer",
        "tenant_id": str(tenant.id),
        "restaurant_id": str(restaurant_factory(other).id),
    }
    assert client.post("/users", json=payload, headers=headers(admin)).status_code == 400


def test_manager_cannot_create_users(client, tenant_factory, user_factory, headers):
    manager = user_factory(ROLE_MANAGER, tenant=tenant_factory())
    r = client.post("/users", json={"email": "a@example.com", "password": "secret123"}, headers=headers(manager))
    assert r.status_code == 403


def test_user_listing_is_tenant_scoped(client, tenant_factory, user_factory, headers):
    t1, t2 = tenant_factory(), tenant_factory()
    manager = user_factory(ROLE_MANAGER, tenant=t1)
    colleague = user_factory(ROLE_MANAGER, tenant=t1)
    stranger = user_factory(ROLE_MANAGER, tenant=t2)

    ids = {u["id"] for u in client.get("/users", headers=headers(manager)).json()}
    assert ids == {str(manager.id), str(colleague.id)}

    r = client.get("/users", params={"email": stranger.email}, headers=headers(manager))
    assert r.status_code == 404
    r = client.get("/users", params={"email": colleague.email}, headers=headers(manager))
    assert [u["id"] for u in r.json()] == [str(colleague.id)]


def test_change_own_password(client, tenant_factory, user_factory, headers):
    user = user_factory(ROLE_MANAGER, tenant=tenant_factory())
    other = user_factory(ROLE_MANAGER, tenant=tenant_factory())

    r = client.patch(
        f"/users/{user.id}/password",
        json={"current_password": "wrong", "new_password": "newpass1"},
        headers=headers(user),
    )
    assert r.status_code == 400

    r = client.patch(
        f"/users/{other.id}/password",
        json={"current_password": "secret123", "new_password": "newpass1"},
        headers=headers(user),
    )
    assert r.status_code == 403

    r = client.patch(
        f"/users/{user.id}/password",
        json={"current_password": "secret123", "new_password": "newpass1"},
        headers=headers(user),
    )
    assert r.status_code == 200
    assert client.post("/auth/login", json={"email": user.email, "password": "newpass1"}).status_code == 200


def test_manager_toggles_active_within_tenant(client, tenant_factory, restaurant_factory, user_factory, headers):
    tenant, other = tenant_factory(), tenant_factory()
    manager = user_factory(ROLE_MANAGER, tenant=tenant)
    viewer = user_factory(ROLE_VIEWER, tenant=tenant, restaurant=restaurant_factory(tenant))
    foreign = user_factory(ROLE_VIEWER, tenant=other)

    r = client.patch(f"/users/{viewer.id}/active", json={"is_active": False}, headers=headers(manager))
    assert r.status_code == 200
    assert r.json()["is_active"] is False
    assert client.post("/auth/login", json={"email": viewer.email, "password": "secret123"}).status_code == 401

    assert client.patch(f"/users/{foreign.id}/active", json={"is_active": False}, headers=headers(manager)).status_code == 403


def test_restaurants_scoped_by_role(client, tenant_factory, restaurant_factory, user_factory, headers):
    tenant, other = tenant_factory(), tenant_factory()
    r1 = restaurant_factory(tenant, name="Alpha")
    restaurant_factory(tenant, name="Beta")
    restaurant_factory(other, name="Gamma")
    admin = user_factory(ROLE_ADMIN)
    manager = user_factory(ROLE_MANAGER, tenant=tenant)
    viewer = user_factory(ROLE_VIEWER, tenant=tenant, restaurant=r1)

    assert len(client.get("/restaurants", headers=headers(admin)).json()) == 3
    assert [r["name"] for r in client.get("/restaurants", headers=headers(manager)).json()] == ["Alpha", "Beta"]
    assert [r["name"] for r in client.get("/restaurants", headers=headers(viewer)).json()] == ["Alpha"]


def test_manager_creates_restaurant_in_own_tenant(client, tenant_factory, user_factory, headers):
    tenant = tenant_factory()
    manager = user_factory(ROLE_MANAGER, tenant=tenant)
    r = client.post("/restaurants", json={"name": "Chez Nous", "city": "Paris"}, headers=headers(manager))
    assert r.status_code == 201
    assert r.json()["tenant_id"] == str(tenant.id)


def test_admin_must_name_tenant_when_creating_restaurant(client, user_factory, headers):
    admin = user_factory(ROLE_ADMIN)
    assert client.post("/restaurants", json={"name": "Nowhere"}, headers=headers(admin)).status_code == 403


def test_tenant_update_rejects_null_on_required_fields(client, tenant_factory, user_factory, headers):
    tenant = tenant_factory("Mine")
    mh = headers(user_factory(ROLE_MANAGER, tenant=tenant))
    for field in ("name", "restaurant_type", "primary_color", "text_color"):
        assert client.patch(f"/tenants/{tenant.id}", json={field: None}, headers=mh).status_code == 422, field
    assert client.patch(f"/tenants/{tenant.id}", json={"logo_url": None}, headers=mh).status_code == 200
    assert client.get(f"/tenants/{tenant.id}", headers=mh).json()["name"] == "Mine"
