from __future__ import annotations

import os
import time

import requests
from rich import print

BASE = os.getenv("API_BASE_URL", "http://127.0.0.1:8000")

def _headers(jwt: str | None) -> dict[str, str]:
    headers = {"content-type": "application/json"}
    if jwt:
        headers["authorization"] = f"bearer {jwt}"
    return headers

def post(path: str, *, jwt: str | None = None, json: dict | None = None) -> requests.Response:
    return requests.post(f"{BASE}{path}", headers=_headers(jwt), json=json, timeout=10)

def patch(path: str, *, jwt: str | None = None, json: dict | None = None) -> requests.Response:
    return requests.patch(f"{BASE}{path}", headers=_headers(jwt), json=json, timeout=10)

def get(path: str, *, jwt: str | None = None) -> requests.Response:
    return requests.get(f"{BASE}{path}", headers=_headers(jwt), timeout=10)

def login(email: str) -> str:
    r = post("/auth/request-link", json={"email": email})
    r.raise_for_status()
    token = r.json()["token"]

    r2 = post("/auth/redeem", json={"token": token})
    r2.raise_for_status()
    return r2.json()["access_token"]

def wait_ready(timeout_s: float = 30.0) -> None:
    deadline = time.time() + timeout_s
    last_err: Exception | None = None

    while time.time() < deadline:
        try:
            r = get("/ready")
            if r.status_code == 200:
                return
        except requests.RequestException as e:
            last_err = e
        time.sleep(0.5)

    if last_err:
        raise RuntimeError(f"api not ready after {timeout_s}s (last error: {last_err})")
    raise RuntimeError(f"api not ready after {timeout_s}s")

def main() -> None:
    print("[bold]demo: auth -> project -> invite editor -> badge rule -> task to Done -> notifications[/bold]")

    wait_ready()
    print("[green]ready ok[/green]")

    owner_email = "owner@example.com"
    editor_email = "editor@example.com"

    owner_jwt = login(owner_email)
    print("owner authed")

    r = post("/projects", jwt=owner_jwt, json={"name": f"demo project {int(time.time())}"})
    r.raise_for_status()
    project_id = r.json()["id"]
    print("created project:", project_id)

    r = post(f"/projects/{project_id}/members", jwt=owner_jwt, json={"email": editor_email, "role": "Editor"})
    r.raise_for_status()
    editor_id = r.json()["user_id"]
    print("invited editor:", editor_email)

    editor_jwt = login(editor_email)
    print("editor authed")

    r = post(
        f"/projects/{project_id}/automations",
        jwt=owner_jwt,
        json={
            "name": "Finisher badge",
            "trigger": {"type": "task_status_change", "condition": {"toStatus": "Done"}},
            "action": {"type": "assign_badge", "params": {"badgeName": "Finisher"}},
        },
    )
    r.raise_for_status()
    print("created automation:", r.json()["id"])

    r = post(
        f"/projects/{project_id}/tasks",
        jwt=owner_jwt,
        json={"title": "demo task", "assignee_id": editor_id},
    )
    r.raise_for_status()
    task_id = r.json()["id"]
    print("created task:", task_id)

    # editor moves it, the rule awards the badge
    r = patch(f"/projects/{project_id}/tasks/{task_id}", jwt=editor_jwt, json={"status": "Done"})
    r.raise_for_status()
    print("moved task to:", r.json()["status"])

    r = get("/notifications", jwt=editor_jwt)
    r.raise_for_status()
    for n in r.json():
        print(f"  [{n['category']}] {n['content']}")
    print("[bold green]demo complete[/bold green]")

if __name__ == "__main__":
    main()
