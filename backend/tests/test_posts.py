from conftest import API, auth, create_project, register


class TestPosts:
    def _setup(self, client):
        owner, _ = register(client, "Owner")
        project = create_project(client, owner, ["backend"])
        dev, dev_id = register(client, "Dev")
        client.put(f"{API}/project/{project['id']}/apply", json={"role": "backend"}, headers=auth(dev))
        client.put(f"{API}/project/applicants/{dev_id}/accept", headers=auth(owner))
        return owner, dev, project["id"]

    def _post(self, client, token, project_id, title="Standup"):
        r = client.post(f"{API}/project/{project_id}/posts", json={
            "title": title,
            "text": "Notes from today",
        }, headers=auth(token))
        assert r.status_code == 201, r.text
        return r.json()

    def test_create_and_list(self, client):
        owner, dev, project_id = self._setup(client)
        post = self._post(client, owner, project_id)
        assert post["name"] == "Owner"
        assert post["comments"] == []

        r = client.get(f"{API}/project/{project_id}/posts", headers=auth(dev))
        assert r.status_code == 200
        assert [p["id"] for p in r.json()] == [post["id"]]

        r = client.get(f"{API}/project/{project_id}/posts/{post['id']}", headers=auth(dev))
        assert r.json()["title"] == "Standup"

    def test_outsider_cannot_post(self, client):
        _, _, project_id = self._setup(client)
        outsider, _ = register(client, "Outsider")
        r = client.post(f"{API}/project/{project_id}/posts", json={
            "title": "Hi",
            "text": "Let me in",
        }, headers=auth(outsider))
        assert r.status_code == 403

    def test_only_author_deletes_post(self, client):
        owner, dev, project_id = self._setup(client)
        post = self._post(client, owner, project_id)

        r = client.delete(f"{API}/project/{project_id}/posts/{post['id']}", headers=auth(dev))
        assert r.status_code == 403

        r = client.delete(f"{API}/project/{project_id}/posts/{post['id']}", headers=auth(owner))
        assert r.status_code == 200
        r = client.get(f"{API}/project/{project_id}/posts/{post['id']}", headers=auth(owner))
        assert r.status_code == 404

    def test_comments(self, client):
        owner, dev, project_id = self._setup(client)
        post = self._post(client, owner, project_id)

        r = client.post(f"{API}/project/{project_id}/posts/comment/{post['id']}", json={
            "text": "Looks good",
        }, headers=auth(dev))
        assert r.status_code == 201
        comments = r.json()["comments"]
        assert [(c["name"], c["text"]) for c in comments] == [("Dev", "Looks good")]

        comment_id = comments[0]["id"]
        url = f"{API}/project/{project_id}/posts/comment/{post['id']}/{comment_id}"
        assert client.delete(url, headers=auth(owner)).status_code == 403

        r = client.delete(url, headers=auth(dev))
        assert r.status_code == 200
        assert r.json()["comments"] == []

    def test_empty_comment_rejected(self, client):
        owner, _, project_id = self._setup(client)
        post = self._post(client, owner, project_id)
        r = client.post(f"{API}/project/{project_id}/posts/comment/{post['id']}", json={
            "text": "  ",
        }, headers=auth(owner))
        assert r.status_code == 400
