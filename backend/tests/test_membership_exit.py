from conftest import API, assert_invariants, auth, create_project, me, register


def _hire(client, owner, project_id, name, role="backend"):
    token, user_id = register(client, name, skills=role)
    r = client.put(f"{API}/project/{project_id}/apply", json={"role": role}, headers=auth(token))
    assert r.status_code == 200, r.text
    r = client.put(f"{API}/project/applicants/{user_id}/accept", headers=auth(owner))
    assert r.status_code == 200, r.text
    return token, user_id


class TestLeave:
    def test_leave_vacates_slot(self, client, test_db):
        owner, _ = register(client, "Owner")
        project = create_project(client, owner, ["backend"])
        dev, dev_id = _hire(client, owner, project["id"], "Dev")
        client.post(f"{API}/project/tasks", json={
            "developer_id": dev_id,
            "title": "API",
            "description": "Build the API",
        }, headers=auth(owner))

        r = client.post(f"{API}/project/leave", headers=auth(dev))
        assert r.status_code == 200

        profile = me(client, dev)
        assert profile["current_job"] is None
        assert profile["projects"] == []

        data = client.get(f"{API}/project/{project['id']}", headers=auth(owner)).json()
        assert data["status"] == "HIRING"
        assert data["members"][1]["vacancy"] is True
        assert data["members"][1]["developer_id"] is None
        assert data["task_count"] == 0
        assert_invariants(test_db())

    def test_owner_cannot_leave(self, client):
        owner, _ = register(client, "Owner")
        create_project(client, owner, ["backend"])
        r = client.post(f"{API}/project/leave", headers=auth(owner))
        assert r.status_code == 409
        assert r.json()["detail"] == "project owner cannot leave; close the project instead"

    def test_leave_without_project(self, client):
        dev, _ = register(client, "Dev")
        r = client.post(f"{API}/project/leave", headers=auth(dev))
        assert r.status_code == 409
        assert r.json()["detail"] == "user is not part of a project"

    def test_can_rejoin_after_leaving(self, client, test_db):
        owner, _ = register(client, "Owner")
        project = create_project(client, owner, ["backend"])
        dev, dev_id = _hire(client, owner, project["id"], "Dev")
        client.post(f"{API}/project/leave", headers=auth(dev))

        r = client.put(f"{API}/project/{project['id']}/apply", json={"role": "backend"}, headers=auth(dev))
        assert r.status_code == 200
        r = client.put(f"{API}/project/applicants/{dev_id}/accept", headers=auth(owner))
        assert r.status_code == 200
        assert r.json()["status"] == "FULL"
        assert_invariants(test_db())


class TestRemoveMember:
    def test_remove_member(self, client, test_db):
        owner, _ = register(client, "Owner")
        project = create_project(client, owner, ["backend"])
        dev, dev_id = _hire(client, owner, project["id"], "Dev")

        r = client.delete(f"{API}/project/members/{dev_id}", headers=auth(owner))
        assert r.status_code == 200
        data = r.json()
        assert data["status"] == "HIRING"
        assert all(m["developer_id"] != dev_id for m in data["members"])
        assert me(client, dev)["current_job"] is None
        assert_invariants(test_db())

    def test_remove_non_member(self, client):
        owner, _ = register(client, "Owner")
        create_project(client, owner, ["backend"])
        _, dev_id = register(client, "Dev")
        r = client.delete(f"{API}/project/members/{dev_id}", headers=auth(owner))
        assert r.status_code == 404
        assert r.json()["detail"] == "user is not a member of this project"

    def test_owner_cannot_be_removed(self, client):
        owner, owner_id = register(client, "Owner")
        create_project(client, owner, ["backend"])
        r = client.delete(f"{API}/project/members/{owner_id}", headers=auth(owner))
        assert r.status_code == 409

    def test_member_cannot_remove_others(self, client):
        owner, owner_id = register(client, "Owner")
        project = create_project(client, owner, ["backend", "frontend"])
        dev, _ = _hire(client, owner, project["id"], "Dev")
        _, other_id = _hire(client, owner, project["id"], "Other", role="frontend")
        r = client.delete(f"{API}/project/members/{other_id}", headers=auth(dev))
        assert r.status_code == 403


class TestCloseProject:
    def test_close_evicts_members_and_clears_board(self, client, test_db):
        owner, owner_id = register(client, "Owner")
        project = create_project(client, owner, ["backend", "frontend", "qa"])
        a, a_id = _hire(client, owner, project["id"], "Alice")
        b, b_id = _hire(client, owner, project["id"], "Bob", role="frontend")
        c, _ = register(client, "Carol", skills="qa")
        client.put(f"{API}/project/{project['id']}/apply", json={"role": "qa"}, headers=auth(c))

        client.post(f"{API}/project/tasks", json={
            "developer_id": a_id,
            "title": "API",
            "description": "Build the API",
        }, headers=auth(owner))
        client.post(f"{API}/project/{project['id']}/posts", json={
            "title": "Kickoff",
            "text": "Welcome aboard",
        }, headers=auth(b))

        r = client.post(f"{API}/project/close", headers=auth(owner))
        assert r.status_code == 200
        data = r.json()
        assert data["status"] == "COMPLETE"
        assert data["task_count"] == 0
        assert data["post_count"] == 0
        assert data["applicants"] == []
        assert all(m["vacancy"] for m in data["members"])

        for token in (owner, a, b):
            assert me(client, token)["current_job"] is None
        assert me(client, c)["applied"] == []
        # closed projects stay in the members' history
        assert me(client, a)["projects"][0]["project_id"] == project["id"]
        assert_invariants(test_db())

    def test_closed_project_refuses_new_claims(self, client):
        owner, _ = register(client, "Owner")
        project = create_project(client, owner, ["backend"])
        client.post(f"{API}/project/close", headers=auth(owner))

        dev, _ = register(client, "Dev")
        r = client.put(f"{API}/project/{project['id']}/apply", json={"role": "backend"}, headers=auth(dev))
        assert r.status_code == 409
        assert r.json()["detail"] == "project is complete"

    def test_owner_can_start_over_after_close(self, client, test_db):
        owner, _ = register(client, "Owner")
        create_project(client, owner, ["backend"])
        client.post(f"{API}/project/close", headers=auth(owner))

        r = client.post(f"{API}/project/close", headers=auth(owner))
        assert r.status_code == 403

        second = create_project(client, owner, ["design"], title="Second")
        assert me(client, owner)["current_job"] == second["id"]
        assert_invariants(test_db())
