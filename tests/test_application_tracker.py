from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from resume_tailor.models.application import ApplicationStatus
from resume_tailor.schemas.application import ApplicationCreate
from resume_tailor.services import store


def _create(client, headers, **overrides):
    payload = {"company_name": "Google", "role_name": "Senior Engineer", **overrides}
    return client.post("/api/applications", headers=headers, json=payload)


def test_create_application_defaults_to_applied(client, auth_headers):
    response = _create(client, auth_headers, match_score=85, ats_score=92)
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "applied"
    assert data["company_name"] == "Google"
    assert data["match_score"] == 85
    assert data["ats_score"] == 92
    assert data["applied_date"] is not None


@pytest.mark.parametrize("field", ["company_name", "role_name"])
def test_names_are_required(client, auth_headers, field):
    response = _create(client, auth_headers, **{field: "   "})
    assert response.status_code == 422


def test_scores_must_be_percentages(client, auth_headers):
    assert _create(client, auth_headers, match_score=101).status_code == 422


def test_unknown_customization_is_rejected(client, auth_headers):
    assert _create(client, auth_headers, customization_id=4242).status_code == 404


def test_any_status_may_follow_any_status(client, auth_headers):
    app_id = _create(client, auth_headers).json()["id"]
    for new_status in ["interview", "offer", "rejected", "applied", "withdrawn", "interview"]:
        response = client.patch(f"/api/applications/{app_id}/status", headers=auth_headers, json={"status": new_status})
        assert response.status_code == 200
        assert response.json()["status"] == new_status


def test_status_update_with_notes_and_outcome(client, auth_headers):
    app_id = _create(client, auth_headers, notes="Referred by Sam").json()["id"]
    response = client.patch(f"/api/applications/{app_id}/status", headers=auth_headers, json={
        "status": "rejected",
        "outcome": "Position filled internally",
    })
    data = response.json()
    assert data["outcome"] == "Position filled internally"
    assert data["notes"] == "Referred by Sam"


def test_invalid_status_is_rejected(client, auth_headers):
    app_id = _create(client, auth_headers).json()["id"]
    response = client.patch(f"/api/applications/{app_id}/status", headers=auth_headers, json={"status": "ghosted"})
    assert response.status_code == 422


def test_delete_application(client, auth_headers):
    app_id = _create(client, auth_headers).json()["id"]
    assert client.delete(f"/api/applications/{app_id}", headers=auth_headers).json() == {"success": True}
    assert client.get("/api/applications", headers=auth_headers).json() == []
    assert client.delete(f"/api/applications/{app_id}", headers=auth_headers).status_code == 404


def test_applications_are_private(client, auth_headers, other_user, get_token):
    app_id = _create(client, auth_headers).json()["id"]
    headers = {"Authorization": f"Bearer {get_token(other_user)}"}
    assert client.get("/api/applications", headers=headers).json() == []
    response = client.patch(f"/api/applications/{app_id}/status", headers=headers, json={"status": "offer"})
    assert response.status_code == 404


def test_stats_by_status(client, auth_headers):
    for status in ["applied", "interview", "interview", "offer", "rejected"]:
        _create(client, auth_headers, status=status)

    stats = client.get("/api/applications/stats", headers=auth_headers).json()
    assert stats == {
        "total": 5, "applied": 1, "interview": 2, "offer": 1,
        "rejected": 1, "withdrawn": 0, "success_rate": 20,
    }


def test_stats_success_rate(db_session, user):
    for index in range(10):
        status = ApplicationStatus.OFFER if index == 0 else ApplicationStatus.APPLIED
        store.create_application(db_session, user.id, ApplicationCreate(
            company_name=f"Company {index}", role_name="Engineer", status=status,
        ))
    stats = store.get_application_stats(db_session, user.id)
    assert stats.total == 10
    assert stats.offer == 1
    assert stats.success_rate == 10


def test_stats_success_rate_rounds_half_up(db_session, user):
    for index in range(8):
        status = ApplicationStatus.OFFER if index == 0 else ApplicationStatus.REJECTED
        store.create_application(db_session, user.id, ApplicationCreate(
            company_name=f"Company {index}", role_name="Engineer", status=status,
        ))
    assert store.get_application_stats(db_session, user.id).success_rate == 13


def test_stats_with_no_applications(db_session, user):
    stats = store.get_application_stats(db_session, user.id)
    assert stats.total == 0
    assert stats.success_rate == 0


def test_lists_degrade_when_database_is_down():
    db = MagicMock()
    db.query.side_effect = OperationalError("SELECT 1", {}, Exception("connection refused"))

    assert store.get_user_applications(db, 1) == []
    assert store.get_user_resumes(db, 1) == []
    assert store.get_user_customizations(db, 1) == []
    assert store.get_application_stats(db, 1).total == 0
    db.rollback.assert_called()


def test_create_raises_when_database_is_down():
    db = MagicMock()
    db.commit.side_effect = OperationalError("INSERT", {}, Exception("connection refused"))
    with pytest.raises(OperationalError):
        store.create_application(db, 1, ApplicationCreate(company_name="A", role_name="B"))
    db.rollback.assert_called_once()
