from conftest import API, auth, create_project, register


class TestTaskBoard:
    def _setup(self, client):
        owner, _ = register(client, "Owner")
        project = create_project(client, owner, ["backend"])
        dev, dev_id = register(client, "Dev", skills="backend")
        client.put(f"{API}/project/{project['id']}/apply", json={"role": "backend"}, headers=auth(dev))
        client.put(f"{API}/project/applicants/{dev_id}/accept", headers=auth(owner))
        return owner, dev, dev_id

    def _create(self, client, owner, dev_id, title="API"):
        r = client.post(f"{API}/project/tasks", json={
            "developer_id": dev_id,
            "title": title,
            "description": "Build it",
        }, headers=auth(owner))
        assert r.status_code == 201, r.text
        return r.json()

    def _act(self, client, token, task_id, action, **body):
        return client.put(f"{API}/project/tasks/{task_id}/{action}", json=body or None, headers=auth(token))

    def test_create_and_list(self, client):
        owner, dev, dev_id = self._setup(client)
        task = self._create(client, owner, dev_id)
        assert task["status"] == "TODO"
        assert task["developer_id"] == dev_id

        self._create(client, owner, dev_id, title="UI")
        for token in (owner, dev):
            r = client.get(f"{API}/project/tasks", headers=auth(token))
            assert r.status_code == 200
            assert [t["title"] for t in r.json()] == ["API", "UI"]

    def test_full_lifecycle(self, client):
        owner, dev, dev_id = self._setup(client)
        task = self._create(client, owner, dev_id)

        assert self._act(client, dev, task["id"], "advance").json()["status"] == "DOING"
        assert self._act(client, dev, task["id"], "advance").json()["status"] == "DONE"

        r = self._act(client, owner, task["id"], "return", note="Missing tests")
        assert r.status_code == 200
        assert r.json()["status"] == "DOING"
        assert r.json()["note"] == "Missing tests"

        assert self._act(client, dev, task["id"], "advance").json()["status"] == "DONE"
        r = self._act(client, owner, task["id"], "close")
        assert r.status_code == 200
        assert r.json()["status"] == "COMPLETE"

    def test_illegal_transitions(self, client):
        owner, dev, dev_id = self._setup(client)
        task = self._create(client, owner, dev_id)

        r = self._act(client, owner, task["id"], "close")
        assert r.status_code == 409
        assert r.json()["detail"] == "cannot close a task that is TODO"

        r = self._act(client, owner, task["id"], "return", note="again")
        assert r.status_code == 409

        self._act(client, dev, task["id"], "advance")
        self._act(client, dev, task["id"], "advance")
        r = self._act(client, dev, task["id"], "advance")
        assert r.status_code == 409
        assert r.json()["detail"] == "cannot advance a task that is DONE"

    def test_only_assignee_advances(self, client):
        owner, dev, dev_id = self._setup(client)
        task = self._create(client, owner, dev_id)
        r = self._act(client, owner, task["id"], "advance")
        assert r.status_code == 403
        assert r.json()["detail"] == "only the assignee may advance a task"

    def test_only_owner_assigns_and_reviews(self, client):
        owner, dev, dev_id = self._setup(client)
        r = client.post(f"{API}/project/tasks", json={
            "developer_id": dev_id,
            "title": "Self-assigned",
            "description": "Nope",
        }, headers=auth(dev))
        assert r.status_code == 403

        task = self._create(client, owner, dev_id)
        self._act(client, dev, task["id"], "advance")
        self._act(client, dev, task["id"], "advance")
        assert self._act(client, dev, task["id"], "close").status_code == 403

    def test_assignee_must_be_member(self, client):
        owner, _, _ = self._setup(client)
        _, outsider_id = register(client, "Outsider")
        r = client.post(f"{API}/project/tasks", json={
            "developer_id": outsider_id,
            "title": "API",
            "description": "Build it",
        }, headers=auth(owner))
        assert r.status_code == 404

    def test_outsider_cannot_list(self, client):
        self._setup(client)
        outsider, _ = register(client, "Outsider")
        r = client.get(f"{API}/project/tasks", headers=auth(outsider))
        assert r.status_code == 403
        assert r.json()["detail"] == "user not part of project"

    def test_unknown_task(self, client):
        owner, _, _ = self._setup(client)
        r = self._act(client, owner, "missing", "close")
        assert r.status_code == 404
