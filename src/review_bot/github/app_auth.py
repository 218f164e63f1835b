import time

import httpx
import jwt

GITHUB_API_URL = "https://api.github.com"


class GitHubAppAuth:
    def __init__(self, app_id: str | None, private_key: str | None):
        self.app_id = app_id
        self.private_key = private_key

    @property
    def configured(self) -> bool:
        return bool(self.app_id and self.private_key)

    def get_jwt(self) -> str:
        now = int(time.time())
        payload = {"iat": now - 60, "exp": now + 600, "iss": self.app_id}
        return jwt.encode(payload, self.private_key, algorithm="RS256")

    def get_installation_token(self, installation_id: int) -> str:
        jwt_token = self.get_jwt()
        resp = httpx.post(
            f"{GITHUB_API_URL}/app/installations/{installation_id}/access_tokens",
            headers={
                "Authorization": f"Bearer {jwt_token}",
                "Accept": "application/vnd.github+json",
            },
            timeout=30,
        )
        resp.raise_for_status()
        return resp.json()["token"]
