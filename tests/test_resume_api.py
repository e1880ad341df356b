import base64
import io

import docx
import pytest
from fastapi import status

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def _docx_payload(*lines):
    document = docx.Document()
    for line in lines:
        document.add_paragraph(line)
    buffer = io.BytesIO()
    document.save(buffer)
    return base64.b64encode(buffer.getvalue()).decode()


def test_upload_resume(client, auth_headers, fake_ai, storage_root, user):
    response = client.post("/api/resumes/upload", headers=auth_headers, json={
        "file_name": "jane.docx",
        "file_data": _docx_payload("Jane Doe", "Backend engineer"),
        "mime_type": DOCX_MIME,
    })
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["original_file_name"] == "jane.docx"
    assert data["file_key"].startswith(f"resumes/{user.id}/")
    assert data["file_url"] == f"/files/{data['file_key']}"
    assert data["parsed_content"]["skills"][0] == "Python"
    assert (storage_root / data["file_key"]).is_file()


def test_upload_rejects_unsupported_type(client, auth_headers, fake_ai):
    response = client.post("/api/resumes/upload", headers=auth_headers, json={
        "file_name": "jane.txt",
        "file_data": base64.b64encode(b"plain text").decode(),
        "mime_type": "text/plain",
    })
    assert response.status_code == 400
    assert response.json()["errors"][0] == {"msg": "Unsupported file type: text/plain", "code": "UNSUPPORTED_FILE"}
    assert fake_ai.calls == []


def test_upload_rejects_bad_base64(client, auth_headers, fake_ai):
    response = client.post("/api/resumes/upload", headers=auth_headers, json={
        "file_name": "jane.pdf", "file_data": "%%%", "mime_type": "application/pdf",
    })
    assert response.status_code == 400


@pytest.mark.parametrize("raw,mime_type", [
    (b"not a pdf", "application/pdf"),
    (b"\xd0\xcf\x11\xe0legacy", "application/msword"),
])
def test_upload_rejects_corrupt_files(client, auth_headers, fake_ai, raw, mime_type):
    response = client.post("/api/resumes/upload", headers=auth_headers, json={
        "file_name": "broken", "file_data": base64.b64encode(raw).decode(), "mime_type": mime_type,
    })
    assert response.status_code == 400
    error = response.json()["errors"][0]
    assert error["code"] == "UNSUPPORTED_FILE"
    assert error["msg"].startswith(f"Could not read {mime_type} file")
    assert fake_ai.calls == []


def test_upload_ai_failure_is_503(client, auth_headers, fake_ai):
    from resume_tailor.services.ai_orchestrator import AIDomain
    fake_ai.responses[AIDomain.RESUME] = None
    response = client.post("/api/resumes/upload", headers=auth_headers, json={
        "file_name": "jane.docx", "file_data": _docx_payload("Jane"), "mime_type": DOCX_MIME,
    })
    assert response.status_code == 503
    assert response.json()["errors"][0]["msg"] == "Failed to parse resume: No response from AI"


def test_list_and_get_resumes(client, auth_headers, resume_record):
    listed = client.get("/api/resumes", headers=auth_headers)
    assert listed.status_code == 200
    assert [r["id"] for r in listed.json()] == [resume_record.id]

    fetched = client.get(f"/api/resumes/{resume_record.id}", headers=auth_headers)
    assert fetched.status_code == 200
    assert fetched.json()["parsed_content"]["experience"][0]["company"] == "Acme Corp"


def test_resumes_are_private(client, other_user, get_token, resume_record):
    headers = {"Authorization": f"Bearer {get_token(other_user)}"}
    assert client.get(f"/api/resumes/{resume_record.id}", headers=headers).status_code == 404
    assert client.get("/api/resumes", headers=headers).json() == []


def test_create_job_analyzes_description(client, auth_headers, fake_ai):
    response = client.post("/api/jobs", headers=auth_headers, json={
        "description": "Python engineer wanted",
        "company_name": "Globex",
        "role_name": "Backend Engineer",
    })
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["analysis"]["required_skills"] == ["Python", "PostgreSQL", "REST APIs"]
    assert data["company_name"] == "Globex"


def test_create_job_requires_description(client, auth_headers, fake_ai):
    response = client.post("/api/jobs", headers=auth_headers, json={"description": ""})
    assert response.status_code == 422


def test_list_jobs_newest_first(client, auth_headers, fake_ai):
    first = client.post("/api/jobs", headers=auth_headers, json={"description": "first"}).json()
    second = client.post("/api/jobs", headers=auth_headers, json={"description": "second"}).json()
    listed = client.get("/api/jobs", headers=auth_headers).json()
    assert [j["id"] for j in listed] == [second["id"], first["id"]]
    assert client.get(f"/api/jobs/{first['id']}", headers=auth_headers).json()["description"] == "first"
    assert client.get("/api/jobs/9999", headers=auth_headers).status_code == 404
