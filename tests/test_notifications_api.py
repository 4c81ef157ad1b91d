import uuid

def login(client, email: str) -> str:
    r = client.post("/auth/request-link", json={"email": email})
    assert r.status_code == 200, r.text
    r = client.post("/auth/redeem", json={"token": r.json()["token"]})
    assert r.status_code == 200, r.text
    return r.json()["access_token"]

def auth(jwt: str) -> dict[str, str]:
    return {"authorization": f"bearer {jwt}"}

def uniq_email(prefix: str) -> str:
    return f"{prefix}+{uuid.uuid4().hex[:10]}@example.com"

def invite_to_new_project(client, owner_jwt: str, email: str) -> None:
    project_id = client.post("/projects", headers=auth(owner_jwt), json={"name": "p"}).json()["id"]
    r = client.post(f"/projects/{project_id}/members", headers=auth(owner_jwt), json={"email": email, "role": "Viewer"})
    assert r.status_code == 200, r.text

def test_mark_all_read_only_touches_own_inbox(client):
    owner_jwt = login(client, uniq_email("owner"))
    alice_email, bob_email = uniq_email("alice"), uniq_email("bob")

    for _ in range(2):
        invite_to_new_project(client, owner_jwt, alice_email)
    invite_to_new_project(client, owner_jwt, bob_email)

    alice_jwt = login(client, alice_email)
    bob_jwt = login(client, bob_email)

    r = client.post("/notifications/read-all", headers=auth(alice_jwt))
    assert r.status_code == 200, r.text
    assert r.json() == {"updated": 2}

    assert client.get("/notifications?unread_only=true", headers=auth(alice_jwt)).json() == []
    assert len(client.get("/notifications?unread_only=true", headers=auth(bob_jwt)).json()) == 1

    # nothing left to update
    assert client.post("/notifications/read-all", headers=auth(alice_jwt)).json() == {"updated": 0}

def test_mark_single_read(client):
    owner_jwt = login(client, uniq_email("owner"))
    email = uniq_email("member")
    invite_to_new_project(client, owner_jwt, email)
    jwt = login(client, email)

    (n,) = client.get("/notifications", headers=auth(jwt)).json()
    assert n["category"] == "project_invitation"
    assert n["is_read"] is False

    r = client.post(f"/notifications/{n['id']}/read", headers=auth(jwt))
    assert r.status_code == 200
    assert r.json()["is_read"] is True

    # someone else's notification is not found
    other_jwt = login(client, uniq_email("other"))
    assert client.post(f"/notifications/{n['id']}/read", headers=auth(other_jwt)).status_code == 404
