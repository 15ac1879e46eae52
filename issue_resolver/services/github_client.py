"""GitHub REST client for the calls tasks need"""

from typing import Any, Dict, List, Optional

import httpx

from .base_service import BaseService


class GitHubClient(BaseService):
    """Thin async wrapper over the GitHub issues API for one repository"""

    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        base_url: str = "https://api.github.com",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        super().__init__("GitHubClient")
        self.owner = owner
        self.repo = repo

        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self.client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport
        )

    @property
    def _issues_path(self) -> str:
        return f"/repos/{self.owner}/{self.repo}/issues"

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        with self.traced_operation("github_request", method=method, path=path):
            response = await self.client.request(method, path, **kwargs)
            response.raise_for_status()
            return response

    async def get_open_issues(self, limit: int = 100) -> List[Dict[str, Any]]:
        """Open issues, pull requests excluded"""
        try:
            response = await self._request(
                "GET",
                self._issues_path,
                params={"state": "open", "per_page": min(limit, 100)}
            )
        except httpx.HTTPError as e:
            self.logger.error(f"Error fetching issues: {str(e)}")
            raise
        return [issue for issue in response.json() if "pull_request" not in issue][:limit]

    async def get_issue(self, issue_number: int) -> Dict[str, Any]:
        try:
            response = await self._request("GET", f"{self._issues_path}/{issue_number}")
        except httpx.HTTPError as e:
            self.logger.error(f"Error fetching issue {issue_number}: {str(e)}")
            raise
        return response.json()

    async def add_comment(self, issue_number: int, comment: str) -> None:
        try:
            await self._request(
                "POST",
                f"{self._issues_path}/{issue_number}/comments",
                json={"body": comment}
            )
        except httpx.HTTPError as e:
            self.logger.error(f"Error adding comment to issue {issue_number}: {str(e)}")
            raise
        self.logger.info(f"Comment added to issue #{issue_number}")

    async def add_labels(self, issue_number: int, labels: List[str]) -> None:
        if not labels:
            return
        try:
            await self._request(
                "POST",
                f"{self._issues_path}/{issue_number}/labels",
                json={"labels": labels}
            )
        except httpx.HTTPError as e:
            self.logger.error(f"Error adding labels to issue {issue_number}: {str(e)}")
            raise
        self.logger.info(f"Labels added to issue #{issue_number}: {', '.join(labels)}")

    async def assign_issue(self, issue_number: int, assignee: str) -> None:
        try:
            await self._request(
                "POST",
                f"{self._issues_path}/{issue_number}/assignees",
                json={"assignees": [assignee]}
            )
        except httpx.HTTPError as e:
            self.logger.error(f"Error assigning issue {issue_number}: {str(e)}")
            raise
        self.logger.info(f"Issue #{issue_number} assigned to {assignee}")

    async def close_issue(self, issue_number: int, reason: Optional[str] = None) -> None:
        if reason:
            await self.add_comment(issue_number, f"Closing issue: {reason}")
        try:
            await self._request(
                "PATCH",
                f"{self._issues_path}/{issue_number}",
                json={"state": "closed"}
            )
        except httpx.HTTPError as e:
            self.logger.error(f"Error closing issue {issue_number}: {str(e)}")
            raise
        self.logger.info(f"Issue #{issue_number} closed")

    async def create_issue(
        self,
        title: str,
        body: str,
        labels: Optional[List[str]] = None
    ) -> int:
        """Open a new issue and return its number"""
        try:
            response = await self._request(
                "POST",
                self._issues_path,
                json={"title": title, "body": body, "labels": labels or []}
            )
        except httpx.HTTPError as e:
            self.logger.error(f"Error creating issue: {str(e)}")
            raise
        number = response.json()["number"]
        self.logger.info(f"Created issue #{number}: {title}")
        return number

    async def aclose(self) -> None:
        await self.client.aclose()
