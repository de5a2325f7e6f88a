import requests


class ShortenerClientError(Exception):
    """Raised when the shortener API answers with an error."""

    def __init__(self, status_code: int, detail: str):
        super().__init__(f"Backend error ({status_code}): {detail}")
        self.status_code = status_code
        self.detail = detail


class ShortenerClient:
    """Thin wrapper over the shortener REST API used by the dashboard."""

    def __init__(self, api_base: str, session: requests.Session | None = None, timeout: float = 10):
        self.api_base = api_base.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def shorten(self, url: str) -> dict:
        return self._request("POST", "/api/shorten", json={"url": url})

    def list_urls(self) -> list[dict]:
        return self._request("GET", "/api/urls")["items"]

    def delete_url(self, url_id: str) -> None:
        self._request("DELETE", f"/api/urls/{url_id}")

    def _request(self, method: str, path: str, **kwargs) -> dict:
        response = self.session.request(
            method, f"{self.api_base}{path}", timeout=self.timeout, **kwargs
        )
        if not response.ok:
            try:
                detail = response.json().get("detail")
            except ValueError:
                detail = response.text
            raise ShortenerClientError(response.status_code, detail)
        return response.json()
