from datetime import datetime, timedelta, timezone

import pytest

from franchisehub.utils.roles import ROLE_MANAGER, ROLE_VIEWER


@pytest.fixture
def audit_env(client, headers, tenant_factory, restaurant_factory, user_factory):
    """A tenant with one restaurant, a manager, a viewer and a three-question template."""
    tenant = tenant_factory()
    restaurant = restaurant_factory(tenant, name="Le Central")
    manager = user_factory(ROLE_MANAGER, tenant=tenant, email="inspecteur@example.com")
    viewer = user_factory(ROLE_VIEWER, tenant=tenant, restaurant=restaurant)
    mh = headers(manager)
    template = client.post(
        "/audit-templates",
        json={
            "name": "Hygiène cuisine",
            "category": "hygiene_security",
            "items": [
                {"question": "Surfaces propres ?", "type": "yes_no", "is_required": True},
                {"question": "Tenue du personnel", "type": "score_1_5"},
                {"question": "Remarques", "type": "text"},
            ],
        },
        headers=mh,
    ).json()
    return {
        "tenant": tenant,
        "restaurant": restaurant,
        "manager": manager,
        "viewer": viewer,
        "mh": mh,
        "template": template,
    }


@pytest.fixture
def schedule_audit(client, audit_env):
    def _schedule(when=None, **extra):
        payload = {
            "template_id": audit_env["template"]["id"],
            "restaurant_id": str(audit_env["restaurant"].id),
            "auditor_id": str(audit_env["manager"].id),
            "scheduled_date": (when or datetime.now(timezone.utc) + timedelta(days=2)).isoformat(),
        }
        payload.update(extra)
        r = client.post("/audit-executions", json=payload, headers=audit_env["mh"])
        assert r.status_code == 201, r.text
        return r.json()

    return _schedule


@pytest.fixture
def completed_audit(client, audit_env, schedule_audit):
    """Run an audit to completion: yes on the required item, 4/5 on the score."""
    def _run(**extra):
        execution = schedule_audit(**extra)
        mh = audit_env["mh"]
        items = audit_env["template"]["items"]
        assert client.post(f"/audit-executions/{execution['id']}/start", headers=mh).status_code == 200
        r = client.post(
            f"/audit-executions/{execution['id']}/responses",
            json={"responses": [
                {"template_item_id": items[0]["id"], "value": "yes"},
                {"template_item_id": items[1]["id"], "numeric_value": 4, "comment": "tabliers OK"},
            ]},
            headers=mh,
        )
        assert r.status_code == 200, r.text
        r = client.post(f"/audit-executions/{execution['id']}/complete", json={"summary": {"note": "bien"}}, headers=mh)
        assert r.status_code == 200, r.text
        return r.json()

    return _run
