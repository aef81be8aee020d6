import uuid
from datetime import datetime, timedelta, timezone

from franchisehub.db import models
from franchisehub.utils.roles import ROLE_ADMIN, ROLE_MANAGER, ROLE_VIEWER


def test_template_items_keep_their_order(client, audit_env):
    template = audit_env["template"]
    assert template["is_active"] is True
    assert [i["order_index"] for i in template["items"]] == [0, 1, 2]
    assert [i["type"] for i in template["items"]] == ["yes_no", "score_1_5", "text"]


def test_template_listing_filter_update_and_deactivate(client, audit_env):
    mh = audit_env["mh"]
    other = client.post("/audit-templates", json={"name": "Accueil", "category": "customer_service"}, headers=mh).json()

    by_cat = client.get("/audit-templates", params={"category": "customer_service"}, headers=mh).json()
    assert [t["id"] for t in by_cat] == [other["id"]]
    assert len(client.get("/audit-templates", headers=mh).json()) == 2

    r = client.patch(
        f"/audit-templates/{other['id']}",
        json={"name": "Accueil client", "items": [{"question": "Sourire ?", "type": "yes_no"}]},
        headers=mh,
    )
    assert r.json()["name"] == "Accueil client"
    assert [i["question"] for i in r.json()["items"]] == ["Sourire ?"]

    assert client.delete(f"/audit-templates/{other['id']}", headers=mh).status_code == 204
    assert client.get(f"/audit-templates/{other['id']}", headers=mh).status_code == 404
    assert len(client.get("/audit-templates", headers=mh).json()) == 1


def test_templates_are_tenant_private(client, audit_env, tenant_factory, user_factory, headers):
    outsider = user_factory(ROLE_MANAGER, tenant=tenant_factory())
    assert client.get(f"/audit-templates/{audit_env['template']['id']}", headers=headers(outsider)).status_code == 404
    assert client.get(f"/audit-templates/{audit_env['template']['id']}", headers=headers(audit_env["viewer"])).status_code == 403


def test_suggestions_endpoint(client, audit_env):
    r = client.get("/audit-templates/suggestions/customer_service", headers=audit_env["mh"])
    assert r.status_code == 200
    assert len(r.json()) == 3


def test_schedule_validates_references(client, audit_env, tenant_factory, restaurant_factory):
    mh = audit_env["mh"]
    base = {
        "template_id": audit_env["template"]["id"],
        "restaurant_id": str(audit_env["restaurant"].id),
        "auditor_id": str(audit_env["manager"].id),
        "scheduled_date": (datetime.now(timezone.utc) + timedelta(days=1)).isoformat(),
    }
    foreign = restaurant_factory(tenant_factory())
    assert client.post("/audit-executions", json={**base, "restaurant_id": str(foreign.id)}, headers=mh).status_code == 400
    assert client.post("/audit-executions", json={**base, "template_id": str(uuid.uuid4())}, headers=mh).status_code == 400
    assert client.post("/audit-executions", json={**base, "auditor_id": str(uuid.uuid4())}, headers=mh).status_code == 400

    r = client.post("/audit-executions", json=base, headers=mh)
    assert r.status_code == 201
    assert r.json()["title"] == "Hygiène cuisine"
    assert r.json()["status"] == "scheduled"
    assert r.json()["assigned_by"] == str(audit_env["manager"].id)


def test_full_execution_lifecycle_scores_the_audit(client, audit_env, completed_audit, db_session):
    done = completed_audit()
    assert done["status"] == "completed"
    assert done["total_score"] == 5.0
    assert done["max_possible_score"] == 6.0
    assert done["summary"]["note"] == "bien"
    assert done["summary"]["score"] == {"total": 5.0, "max": 6.0, "percentage": 83.33}
    assert done["completed_at"] is not None

    detail = client.get(f"/audit-executions/{done['id']}", headers=audit_env["mh"]).json()
    assert len(detail["responses"]) == 2

    log = db_session.query(models.ActivityLog).filter(models.ActivityLog.action_type == "audit_complete").one()
    assert str(log.target_id) == done["id"]


def test_responses_are_upserted(client, audit_env, schedule_audit):
    execution = schedule_audit()
    mh = audit_env["mh"]
    item = audit_env["template"]["items"][1]
    client.post(f"/audit-executions/{execution['id']}/start", headers=mh)
    for score in (2, 5):
        client.post(
            f"/audit-executions/{execution['id']}/responses",
            json={"responses": [{"template_item_id": item["id"], "numeric_value": score}]},
            headers=mh,
        )
    detail = client.get(f"/audit-executions/{execution['id']}", headers=mh).json()
    assert [r["numeric_value"] for r in detail["responses"]] == [5.0]


def test_invalid_transitions_are_rejected(client, audit_env, schedule_audit):
    execution = schedule_audit()
    mh = audit_env["mh"]
    item = audit_env["template"]["items"][0]

    r = client.post(
        f"/audit-executions/{execution['id']}/responses",
        json={"responses": [{"template_item_id": item["id"], "value": "yes"}]},
        headers=mh,
    )
    assert r.status_code == 400
    assert client.post(f"/audit-executions/{execution['id']}/complete", headers=mh).status_code == 400

    assert client.post(f"/audit-executions/{execution['id']}/start", headers=mh).status_code == 200
    assert client.post(f"/audit-executions/{execution['id']}/start", headers=mh).status_code == 400

    foreign_item = {"template_item_id": str(uuid.uuid4()), "value": "yes"}
    r = client.post(f"/audit-executions/{execution['id']}/responses", json={"responses": [foreign_item]}, headers=mh)
    assert r.status_code == 400


def test_check_overdue_flags_past_scheduled_audits(client, audit_env, schedule_audit):
    past = schedule_audit(when=datetime.now(timezone.utc) - timedelta(days=1))
    future = schedule_audit()
    mh = audit_env["mh"]

    assert client.post("/audit-executions/check-overdue", headers=mh).json() == {"updated": 1}
    overdue = client.get("/audit-executions", params={"status": "overdue"}, headers=mh).json()
    assert [e["id"] for e in overdue] == [past["id"]]
    scheduled = client.get("/audit-executions", params={"status": "scheduled"}, headers=mh).json()
    assert [e["id"] for e in scheduled] == [future["id"]]
    assert client.post("/audit-executions/check-overdue", headers=mh).json() == {"updated": 0}


def test_viewer_sees_only_own_restaurant_audit(client, audit_env, schedule_audit, restaurant_factory, user_factory, headers):
    execution = schedule_audit()
    assert client.get(f"/audit-executions/{execution['id']}", headers=headers(audit_env["viewer"])).status_code == 200
    elsewhere = user_factory(
        ROLE_VIEWER, tenant=audit_env["tenant"], restaurant=restaurant_factory(audit_env["tenant"])
    )
    assert client.get(f"/audit-executions/{execution['id']}", headers=headers(elsewhere)).status_code == 403


def test_admin_lists_executions_for_named_tenant(client, audit_env, schedule_audit, user_factory, headers):
    execution = schedule_audit()
    admin = user_factory(ROLE_ADMIN)
    assert client.get("/audit-executions", headers=headers(admin)).status_code == 403
    r = client.get("/audit-executions", params={"tenant_id": str(audit_env["tenant"].id)}, headers=headers(admin))
    assert [e["id"] for e in r.json()] == [execution["id"]]


def test_non_conformities_crud_and_stats(client, audit_env, completed_audit):
    done = completed_audit()
    mh = audit_env["mh"]
    item = audit_env["template"]["items"][0]

    critical = client.post(
        "/non-conformities",
        json={"execution_id": done["id"], "item_id": item["id"], "severity": "critical", "description": "Plan de travail sale"},
        headers=mh,
    )
    assert critical.status_code == 201
    minor = client.post(
        "/non-conformities", json={"execution_id": done["id"], "severity": "low", "description": "Étiquette"}, headers=mh
    ).json()

    resolved = client.patch(f"/non-conformities/{minor['id']}", json={"status": "resolved"}, headers=mh).json()
    assert resolved["status"] == "resolved"
    assert resolved["resolution_date"] is not None

    stats = client.get("/non-conformities/stats", headers=mh).json()
    assert stats == {"total": 2, "by_status": {"open": 1, "in_progress": 0, "resolved": 1}, "critical": 1}

    crit_only = client.get("/non-conformities", params={"severity": "critical"}, headers=mh).json()
    assert [nc["id"] for nc in crit_only] == [critical.json()["id"]]
    open_only = client.get("/non-conformities", params={"status": "open"}, headers=mh).json()
    assert [nc["id"] for nc in open_only] == [critical.json()["id"]]

    assert client.delete(f"/non-conformities/{minor['id']}", headers=mh).status_code == 204
    assert client.get(f"/non-conformities/{minor['id']}", headers=mh).status_code == 404


def test_non_conformity_requires_tenant_execution(client, audit_env, completed_audit, tenant_factory, user_factory, headers):
    done = completed_audit()
    outsider = user_factory(ROLE_MANAGER, tenant=tenant_factory())
    r = client.post(
        "/non-conformities", json={"execution_id": done["id"], "description": "x"}, headers=headers(outsider)
    )
    assert r.status_code == 400


def test_non_conformity_references_are_checked(client, audit_env, completed_audit, tenant_factory, user_factory):
    done = completed_audit()
    mh = audit_env["mh"]
    other_template = client.post(
        "/audit-templates", json={"name": "Accueil", "items": [{"question": "Sourire ?", "type": "yes_no"}]}, headers=mh
    ).json()
    outsider = user_factory(ROLE_MANAGER, tenant=tenant_factory())
    base = {"execution_id": done["id"], "description": "Frigo à 9°C"}

    foreign_item = {**base, "item_id": other_template["items"][0]["id"]}
    assert client.post("/non-conformities", json=foreign_item, headers=mh).status_code == 400
    foreign_user = {**base, "responsible_user_id": str(outsider.id)}
    assert client.post("/non-conformities", json=foreign_user, headers=mh).status_code == 400

    nc = client.post(
        "/non-conformities",
        json={**base, "item_id": audit_env["template"]["items"][0]["id"],
              "responsible_user_id": str(audit_env["viewer"].id)},
        headers=mh,
    )
    assert nc.status_code == 201
    url = f"/non-conformities/{nc.json()['id']}"
    assert client.patch(url, json={"item_id": other_template["items"][0]["id"]}, headers=mh).status_code == 400
    assert client.patch(url, json={"responsible_user_id": str(uuid.uuid4())}, headers=mh).status_code == 400


def test_explicit_null_on_required_fields_is_rejected(client, audit_env, completed_audit):
    mh = audit_env["mh"]
    done = completed_audit()
    nc = client.post(
        "/non-conformities", json={"execution_id": done["id"], "description": "Étiquette"}, headers=mh
    ).json()

    for field in ("status", "severity", "description"):
        r = client.patch(f"/non-conformities/{nc['id']}", json={field: None}, headers=mh)
        assert r.status_code == 422, field
    # nullable columns still accept an explicit null
    cleared = client.patch(f"/non-conformities/{nc['id']}", json={"due_date": None}, headers=mh)
    assert cleared.status_code == 200

    template_url = f"/audit-templates/{audit_env['template']['id']}"
    for field in ("name", "category", "frequency", "is_mandatory"):
        assert client.patch(template_url, json={field: None}, headers=mh).status_code == 422, field
    assert client.get(template_url, headers=mh).json()["name"] == "Hygiène cuisine"
