# tools/jira_api.py
"""
Jira API Client - REST operations used by the audits
"""
from __future__ import annotations

import base64
from typing import Any, Dict, List, Optional
import requests
import logging

logger = logging.getLogger(__name__)
DEFAULT_TIMEOUT = 30


def text_to_adf(text: str) -> Dict[str, Any]:
    """Wrap plain text in a minimal ADF document, one paragraph per line."""
    content = []
    for line in (text or "").splitlines():
        paragraph: Dict[str, Any] = {"type": "paragraph", "content": []}
        if line:
            paragraph["content"].append({"type": "text", "text": line})
        content.append(paragraph)
    return {"type": "doc", "version": 1, "content": content}


def adf_to_text(body: Any) -> str:
    """Flatten an ADF comment body (or a plain string) to text, one line per block."""
    if body is None:
        return ""
    if isinstance(body, str):
        return body

    lines: List[str] = []

    def _inline(node: Dict[str, Any]) -> str:
        if node.get("type") == "text":
            return node.get("text", "")
        if node.get("type") == "hardBreak":
            return "\n"
        return "".join(_inline(c) for c in node.get("content", []) or [])

    for block in body.get("content", []) or []:
        lines.append(_inline(block))
    return "\n".join(lines)


class JiraAPI:
    def __init__(self, config, probe: bool = True):
        self.base_url = config.jira_base_url.rstrip("/")
        self.email: Optional[str] = getattr(config, "jira_email", None)
        self.api_token: Optional[str] = getattr(config, "jira_api_token", None)         # Cloud (Basic)
        self.bearer_token: Optional[str] = getattr(config, "jira_bearer_token", None)   # Server/DC (PAT)
        self.session = requests.Session()

        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": "Jira-Audit-Bot/1.0",
        }
        # Auth selection: prefer Cloud Basic when email+api_token present.
        if self.email and self.api_token:
            logger.info("Using Basic Auth (email + API token)")
            credentials = base64.b64encode(f"{self.email}:{self.api_token}".encode()).decode()
            headers["Authorization"] = f"Basic {credentials}"
        elif self.bearer_token:
            logger.info("Using Bearer Token Auth (Server/DC PAT)")
            headers["Authorization"] = f"Bearer {self.bearer_token}"
        else:
            logger.warning("No authentication configured")
        self.session.headers.update(headers)

        if probe:
            try:
                r = self.session.get(f"{self.base_url}/rest/api/3/myself", timeout=10)
                logger.info(f"Jira probe /myself → {r.status_code}")
            except requests.RequestException as e:
                logger.warning(f"Jira probe error: {e}")

    # ---------------- helpers ----------------
    def _get(self, path: str, **kw):
        return self.session.get(f"{self.base_url}{path}", timeout=DEFAULT_TIMEOUT, **kw)

    def _post(self, path: str, **kw):
        return self.session.post(f"{self.base_url}{path}", timeout=DEFAULT_TIMEOUT, **kw)

    def _put(self, path: str, **kw):
        return self.session.put(f"{self.base_url}{path}", timeout=DEFAULT_TIMEOUT, **kw)

    def _delete(self, path: str, **kw):
        return self.session.delete(f"{self.base_url}{path}", timeout=DEFAULT_TIMEOUT, **kw)

    # -------------- public API ---------------
    def test_connection(self) -> Dict:
        """Test API connection"""
        try:
            response = self._get("/rest/api/3/myself")
            if response.status_code == 200:
                user_data = response.json()
                logger.info(f"Connected to Jira as: {user_data.get('displayName', 'Unknown')}")
                return {"success": True, "user": user_data}
            else:
                logger.error(f"Connection test failed: {response.status_code}")
                return {"error": f"HTTP {response.status_code}", "body": response.text[:300]}
        except requests.RequestException as e:
            logger.error(f"Connection test failed: {e}")
            return {"error": str(e)}

    def get_issue(self, issue_key: str, fields: Optional[List[str]] = None) -> Dict:
        """Get issue details"""
        try:
            params = {"fields": ",".join(fields)} if fields else None
            response = self._get(f"/rest/api/3/issue/{issue_key}", params=params)
            if response.status_code == 200:
                return response.json()
            else:
                return {"error": f"HTTP {response.status_code}: {response.text[:300]}"}
        except requests.RequestException as e:
            return {"error": str(e)}

    def get_comments(self, issue_key: str) -> Dict:
        """Fetch all issue comments (follows pagination)"""
        comments: List[Dict] = []
        start_at = 0
        try:
            while True:
                response = self._get(
                    f"/rest/api/3/issue/{issue_key}/comment",
                    params={"startAt": str(start_at), "maxResults": "100"},
                )
                if response.status_code != 200:
                    logger.error(f"Get comments failed: {response.status_code} {response.text[:300]}")
                    return {"error": f"HTTP {response.status_code}: {response.text[:200]}"}
                data = response.json()
                page = data.get("comments", []) or []
                comments.extend(page)
                start_at += len(page)
                if not page or start_at >= data.get("total", start_at):
                    break
            return {"success": True, "comments": comments}
        except requests.RequestException as e:
            logger.error(f"Get comments error: {e}")
            return {"error": str(e)}

    def add_comment(self, issue_key: str, comment) -> Dict:
        """Add comment to issue - supports both string and ADF format"""
        try:
            body = text_to_adf(comment) if isinstance(comment, str) else comment
            response = self._post(f"/rest/api/3/issue/{issue_key}/comment", json={"body": body})
            if response.status_code == 201:
                logger.info(f"Comment added to {issue_key}")
                return {"success": True, "comment_id": response.json().get("id")}
            else:
                logger.error(f"Comment failed: {response.text[:500]}")
                return {"error": f"HTTP {response.status_code}: {response.text[:200]}"}
        except requests.RequestException as e:
            logger.error(f"Comment error: {e}")
            return {"error": str(e)}

    def update_comment(self, issue_key: str, comment_id: str, comment) -> Dict:
        """Replace the body of an existing comment"""
        try:
            body = text_to_adf(comment) if isinstance(comment, str) else comment
            response = self._put(
                f"/rest/api/3/issue/{issue_key}/comment/{comment_id}", json={"body": body}
            )
            if response.status_code == 200:
                logger.info(f"Comment {comment_id} updated on {issue_key}")
                return {"success": True, "comment_id": comment_id}
            return {"error": f"HTTP {response.status_code}: {response.text[:200]}"}
        except requests.RequestException as e:
            logger.error(f"Update comment error: {e}")
            return {"error": str(e)}

    def delete_comment(self, issue_key: str, comment_id: str) -> Dict:
        """Delete a comment; an already-deleted comment counts as success"""
        try:
            response = self._delete(f"/rest/api/3/issue/{issue_key}/comment/{comment_id}")
            if response.status_code in (204, 404):
                logger.info(f"Comment {comment_id} removed from {issue_key}")
                return {"success": True}
            return {"error": f"HTTP {response.status_code}: {response.text[:200]}"}
        except requests.RequestException as e:
            logger.error(f"Delete comment error: {e}")
            return {"error": str(e)}

    def search_issues(
        self,
        jql: str,
        max_results: int = 50,
        next_page_token: str | None = None,
        fields: list[str] | None = None,
    ) -> dict:
        """
        Jira Cloud 2025+:
        Use GET /rest/api/3/search/jql with query params.
        The endpoint pages by cursor: pass back `next_page_token` until it is None.
        """
        try:
            url = "/rest/api/3/search/jql"
            default_fields = ["summary", "status", "assignee"]
            field_list = fields if fields is not None else default_fields
            params = {
                "jql": jql,
                "maxResults": str(max(1, int(max_results))),
                "fields": ",".join(field_list),
            }
            if next_page_token:
                params["nextPageToken"] = next_page_token

            logger.info(f"JQL search: {jql}")
            resp = self._get(url, params=params)
            if resp.status_code != 200:
                body = resp.text[:800]
                logger.error(f"JQL search failed [{resp.status_code}]: {body}")
                return {"error": f"HTTP {resp.status_code}", "body": body, "jql": jql}

            data = resp.json()
            issues = data.get("issues", [])
            token = data.get("nextPageToken")
            is_last = bool(data.get("isLast", not token))
            logger.info(f"JQL search returned {len(issues)} issues (last_page={is_last})")
            return {
                "success": True,
                "issues": issues,
                "next_page_token": None if is_last else token,
                "is_last": is_last,
            }
        except requests.RequestException as e:
            logger.error(f"JQL search exception: {e}")
            return {"error": str(e), "jql": jql}
