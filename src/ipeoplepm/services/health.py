"""HTTP reachability check for the application service."""

import requests


class HealthService:
    """Checks whether the application answers on its published URL."""

    def __init__(self, logger, requests_module=requests, timeout: float = 5.0):
        self.logger = logger
        self.requests = requests_module
        self.timeout = timeout

    def is_reachable(self, url: str) -> bool:
        for method in ("HEAD", "GET"):
            try:
                response = self.requests.request(
                    method,
                    url,
                    allow_redirects=True,
                    timeout=self.timeout,
                    stream=(method == "GET"),
                )
                response.close()
                if response.status_code < 500:
                    return True
            except self.requests.RequestException as exc:
                self.logger.debug("Reachability check %s %s failed: %s", method, url, exc)

        return False
