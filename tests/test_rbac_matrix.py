import uuid

def login(client, email: str) -> str:
    r = client.post("/auth/request-link", json={"email": email})
    assert r.status_code == 200, r.text
    token = r.json()["token"]

    r = client.post("/auth/redeem", json={"token": token})
    assert r.status_code == 200, r.text
    return r.json()["access_token"]

def auth(jwt: str) -> dict[str, str]:
    return {"authorization": f"bearer {jwt}"}

def uniq_email(prefix: str) -> str:
    return f"{prefix}+{uuid.uuid4().hex[:10]}@example.com"

def invite(client, jwt: str, project_id: str, email: str, role: str):
    return client.post(f"/projects/{project_id}/members", headers=auth(jwt), json={"email": email, "role": role})

def test_role_matrix_admin_editor_viewer(client):
    owner_email, editor_email, viewer_email = uniq_email("owner"), uniq_email("editor"), uniq_email("viewer")
    owner_jwt = login(client, owner_email)

    r = client.post("/projects", headers=auth(owner_jwt), json={"name": "board"})
    assert r.status_code == 200, r.text
    project_id = r.json()["id"]
    assert [s["name"] for s in r.json()["statuses"]] == ["To Do", "In Progress", "Done"]

    assert invite(client, owner_jwt, project_id, editor_email, "Editor").status_code == 200
    assert invite(client, owner_jwt, project_id, viewer_email, "Viewer").status_code == 200

    editor_jwt = login(client, editor_email)
    viewer_jwt = login(client, viewer_email)

    # project: only Admin edits / invites
    r = client.patch(f"/projects/{project_id}", headers=auth(editor_jwt), json={"name": "nope"})
    assert r.status_code == 403
    assert r.json()["detail"] == "insufficient permissions"
    assert invite(client, editor_jwt, project_id, uniq_email("x"), "Viewer").status_code == 403

    # everyone can view
    for jwt in (owner_jwt, editor_jwt, viewer_jwt):
        assert client.get(f"/projects/{project_id}", headers=auth(jwt)).status_code == 200

    # tasks: editor creates and edits, viewer cannot
    r = client.post(f"/projects/{project_id}/tasks", headers=auth(editor_jwt), json={"title": "t1"})
    assert r.status_code == 200, r.text
    task_id = r.json()["id"]
    assert r.json()["status"] == "To Do"

    r = client.post(f"/projects/{project_id}/tasks", headers=auth(viewer_jwt), json={"title": "nope"})
    assert r.status_code == 403

    r = client.patch(f"/projects/{project_id}/tasks/{task_id}", headers=auth(viewer_jwt), json={"title": "x"})
    assert r.status_code == 403

    r = client.patch(f"/projects/{project_id}/tasks/{task_id}", headers=auth(editor_jwt), json={"status": "Done"})
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "Done"

    assert client.get(f"/projects/{project_id}/tasks", headers=auth(viewer_jwt)).status_code == 200

    # automations: viewer reads only
    assert client.get(f"/projects/{project_id}/automations", headers=auth(viewer_jwt)).status_code == 200
    rule = {
        "name": "finisher",
        "trigger": {"type": "task_status_change", "condition": {"toStatus": "Done"}},
        "action": {"type": "assign_badge", "params": {"badgeName": "Finisher"}},
    }
    assert client.post(f"/projects/{project_id}/automations", headers=auth(viewer_jwt), json=rule).status_code == 403
    assert client.post(f"/projects/{project_id}/automations", headers=auth(editor_jwt), json=rule).status_code == 201

    # owner deletes
    assert client.delete(f"/projects/{project_id}/tasks/{task_id}", headers=auth(owner_jwt)).status_code == 200

def test_outsider_and_missing_project(client):
    owner_jwt = login(client, uniq_email("owner"))
    outsider_jwt = login(client, uniq_email("outsider"))

    r = client.post("/projects", headers=auth(owner_jwt), json={"name": "private"})
    project_id = r.json()["id"]

    r = client.get(f"/projects/{project_id}/tasks", headers=auth(outsider_jwt))
    assert r.status_code == 403
    assert r.json()["detail"] == "not a project member"

    r = client.get(f"/projects/{uuid.uuid4()}/tasks", headers=auth(owner_jwt))
    assert r.status_code == 404

    # not listed for the outsider either
    assert client.get("/projects", headers=auth(outsider_jwt)).json() == []

def test_role_change_takes_effect_on_next_request(client):
    owner_jwt = login(client, uniq_email("owner"))
    email = uniq_email("member")

    project_id = client.post("/projects", headers=auth(owner_jwt), json={"name": "p"}).json()["id"]
    user_id = invite(client, owner_jwt, project_id, email, "Viewer").json()["user_id"]
    member_jwt = login(client, email)

    r = client.post(f"/projects/{project_id}/tasks", headers=auth(member_jwt), json={"title": "t"})
    assert r.status_code == 403

    r = client.patch(f"/projects/{project_id}/members/{user_id}", headers=auth(owner_jwt), json={"role": "Editor"})
    assert r.status_code == 200

    r = client.post(f"/projects/{project_id}/tasks", headers=auth(member_jwt), json={"title": "t"})
    assert r.status_code == 200

    assert client.delete(f"/projects/{project_id}/members/{user_id}", headers=auth(owner_jwt)).status_code == 200
    r = client.get(f"/projects/{project_id}/tasks", headers=auth(member_jwt))
    assert r.status_code == 403

def test_requires_bearer_token(client):
    assert client.get("/projects").status_code == 401
    assert client.get("/projects", headers=auth("not-a-jwt")).status_code == 401
