import httpx

from app.config import settings
from app.errors import NotFoundError


def fetch_repos(username: str, client: httpx.Client | None = None) -> list[dict]:
    """Five most recently created public repositories of a GitHub user."""
    params = {"per_page": 5, "sort": "created:asc"}
    if settings.github_client_id and settings.github_client_secret:
        params["client_id"] = settings.github_client_id
        params["client_secret"] = settings.github_client_secret

    owns_client = client is None
    client = client or httpx.Client(base_url=settings.github_api_url, timeout=settings.github_timeout_seconds)
    try:
        response = client.get(
            f"/users/{username}/repos",
            params=params,
            headers={"User-Agent": "devconnector-api", "Accept": "application/vnd.github+json"},
        )
    except httpx.HTTPError as exc:
        raise NotFoundError("no github profile found") from exc
    finally:
        if owns_client:
            client.close()

    if response.status_code != 200:
        raise NotFoundError("no github profile found")
    return response.json()
