import uuid

from franchisehub.db import models
from franchisehub.utils.roles import ROLE_ADMIN, ROLE_MANAGER, ROLE_VIEWER


def _nc_with_action(client, audit_env, execution_id):
    mh = audit_env["mh"]
    nc = client.post(
        "/non-conformities",
        json={"execution_id": execution_id, "severity": "high", "description": "Frigo à 9°C"},
        headers=mh,
    ).json()
    action = client.post(
        "/corrective-actions",
        json={"title": "Régler le thermostat", "restaurant_id": str(audit_env["restaurant"].id),
              "non_conformity_id": nc["id"]},
        headers=mh,
    ).json()
    return nc, action


def test_archive_snapshots_and_removes_execution(client, audit_env, completed_audit, db_session):
    mh = audit_env["mh"]
    done = completed_audit()
    nc, action = _nc_with_action(client, audit_env, done["id"])
    direct = client.post(
        "/corrective-actions",
        json={"title": "Former l'équipe", "restaurant_id": str(audit_env["restaurant"].id),
              "audit_execution_id": done["id"]},
        headers=mh,
    ).json()

    r = client.post(f"/audit-archives/archive/{done['id']}", headers=mh)
    assert r.status_code == 200, r.text
    archive = r.json()
    assert archive["original_execution_id"] == done["id"]
    assert archive["status"] == "archived"
    assert archive["template_name"] == "Hygiène cuisine"
    assert archive["template_category"] == "hygiene_security"
    assert archive["restaurant_name"] == "Le Central"
    assert archive["inspector_name"] == "inspecteur@example.com"
    assert archive["total_score"] == 5.0
    assert archive["archived_by"] == str(audit_env["manager"].id)

    assert len(archive["responses_data"]) == 2
    questions = {entry["question"] for entry in archive["responses_data"]}
    assert questions == {"Surfaces propres ?", "Tenue du personnel"}
    assert [entry["id"] for entry in archive["non_conformities_data"]] == [nc["id"]]
    assert {entry["id"] for entry in archive["corrective_actions_data"]} == {action["id"], direct["id"]}

    assert client.get(f"/audit-executions/{done['id']}", headers=mh).status_code == 404
    assert db_session.query(models.AuditResponse).count() == 0
    assert db_session.query(models.NonConformity).count() == 0

    for kept in (action, direct):
        row = client.get(f"/corrective-actions/{kept['id']}", headers=mh).json()
        assert row["audit_execution_id"] is None
        assert row["non_conformity_id"] is None

    log = db_session.query(models.ActivityLog).filter(models.ActivityLog.action_type == "audit_archive").one()
    assert log.metadata_json["archive_id"] == archive["id"]
    assert log.metadata_json["corrective_actions"] == 2


def test_archive_errors(client, audit_env, completed_audit, schedule_audit):
    mh = audit_env["mh"]
    done = completed_audit()
    assert client.post(f"/audit-archives/archive/{done['id']}", headers=mh).status_code == 200
    assert client.post(f"/audit-archives/archive/{done['id']}", headers=mh).status_code == 409
    assert client.post(f"/audit-archives/archive/{uuid.uuid4()}", headers=mh).status_code == 404

    pending = schedule_audit()
    assert client.post(f"/audit-archives/archive/{pending['id']}", headers=mh).status_code == 400


def test_archive_of_foreign_execution_is_not_found(client, audit_env, completed_audit, tenant_factory, user_factory,
                                                   headers):
    done = completed_audit()
    outsider = user_factory(ROLE_MANAGER, tenant=tenant_factory())
    assert client.post(f"/audit-archives/archive/{done['id']}", headers=headers(outsider)).status_code == 404


def test_auto_archive_with_zero_days_takes_every_completed_audit(client, audit_env, completed_audit, schedule_audit):
    mh = audit_env["mh"]
    completed_audit()
    completed_audit()
    schedule_audit()

    # freshly completed audits are newer than the default threshold
    assert client.post("/audit-archives/auto-archive", headers=mh).json() == {"archived_count": 0}
    r = client.post("/audit-archives/auto-archive", params={"older_than_days": 0}, headers=mh)
    assert r.json() == {"archived_count": 2}
    remaining = client.get("/audit-executions", headers=mh).json()
    assert [e["status"] for e in remaining] == ["scheduled"]


def test_listing_filters_stats_and_delete(client, audit_env, completed_audit):
    mh = audit_env["mh"]
    first = completed_audit()
    second = completed_audit()
    client.post("/audit-archives/auto-archive", params={"older_than_days": 0}, headers=mh)

    page = client.get("/audit-archives", params={"limit": 1}, headers=mh).json()
    assert page["total"] == 2
    assert page["total_pages"] == 2
    assert len(page["data"]) == 1

    assert client.get("/audit-archives", params={"restaurant_name": "central"}, headers=mh).json()["total"] == 2
    assert client.get("/audit-archives", params={"inspector_name": "nobody"}, headers=mh).json()["total"] == 0
    assert client.get("/audit-archives", params={"category": "hygiene_security"}, headers=mh).json()["total"] == 2
    assert client.get("/audit-archives", params={"min_score": 6}, headers=mh).json()["total"] == 0
    assert client.get("/audit-archives", params={"limit": 101}, headers=mh).status_code == 422

    stats = client.get("/audit-archives/stats", headers=mh).json()
    assert stats == {
        "total_archives": 2,
        "average_score": 5.0,
        "categories": [{"category": "hygiene_security", "count": 2}],
    }

    archived = client.get("/audit-archives", headers=mh).json()["data"]
    originals = {a["original_execution_id"] for a in archived}
    assert originals == {first["id"], second["id"]}
    target = archived[0]
    assert client.delete(f"/audit-archives/{target['id']}", headers=mh).json() == {"deleted": True}
    assert client.get("/audit-archives", headers=mh).json()["total"] == 1
    deleted = client.get("/audit-archives", params={"status": "deleted"}, headers=mh).json()
    assert [a["id"] for a in deleted["data"]] == [target["id"]]
    assert client.get("/audit-archives/stats", headers=mh).json()["total_archives"] == 1


def test_viewers_only_see_their_restaurant_archives(
    client, audit_env, completed_audit, restaurant_factory, user_factory, headers
):
    mh = audit_env["mh"]
    done = completed_audit()
    archive = client.post(f"/audit-archives/archive/{done['id']}", headers=mh).json()

    own = client.get("/audit-archives", headers=headers(audit_env["viewer"])).json()
    assert [a["id"] for a in own["data"]] == [archive["id"]]
    assert client.get(f"/audit-archives/{archive['id']}", headers=headers(audit_env["viewer"])).status_code == 200

    elsewhere = user_factory(ROLE_VIEWER, tenant=audit_env["tenant"], restaurant=restaurant_factory(audit_env["tenant"]))
    assert client.get("/audit-archives", headers=headers(elsewhere)).json()["total"] == 0
    assert client.get(f"/audit-archives/{archive['id']}", headers=headers(elsewhere)).status_code == 404
    assert client.delete(f"/audit-archives/{archive['id']}", headers=headers(audit_env["viewer"])).status_code == 403


def test_cleanup_preview_and_purge(client, audit_env, completed_audit, schedule_audit, user_factory, headers, db_session):
    mh = audit_env["mh"]
    archived = completed_audit()
    client.post(f"/audit-archives/archive/{archived['id']}", headers=mh)
    done = completed_audit()
    _nc_with_action(client, audit_env, done["id"])
    schedule_audit()

    assert client.get("/audit-cleanup/preview", headers=mh).status_code == 403

    ah = headers(user_factory(ROLE_ADMIN))
    expected = {
        "audits_deleted": 2,
        "responses_deleted": 2,
        "non_conformities_deleted": 1,
        "corrective_actions_deleted": 1,
        "planning_tasks_deleted": 1,
        "archived_audits_count": 1,
    }
    assert client.get("/audit-cleanup/preview", headers=ah).json() == expected
    assert db_session.query(models.AuditExecution).count() == 2

    assert client.delete("/audit-cleanup", headers=ah).json() == expected
    assert db_session.query(models.AuditExecution).count() == 0
    assert db_session.query(models.CorrectiveAction).count() == 0
    assert db_session.query(models.PlanningTask).count() == 0
    assert db_session.query(models.AuditArchive).count() == 1

    empty = client.get("/audit-cleanup/preview", headers=ah).json()
    assert empty["audits_deleted"] == 0
    assert empty["archived_audits_count"] == 1
