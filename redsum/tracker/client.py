"""Redmine REST API wrapper used to publish summaries."""

from __future__ import annotations

import time
from typing import Any
from urllib.parse import quote, urlsplit, urlunsplit

import requests
from loguru import logger

from redsum.config.tracker import TrackerConfig
from redsum.config.utils import mask_secret
from redsum.errors import RedsumError, ResponseParseError, TrackerApiError

from .models import ConnectivityResult, IssueRef, ProbeResult, ProjectInfo, WikiRef

API_KEY_HEADER = "X-Redmine-API-Key"
PROBE_TIMEOUT = (5.0, 10.0)


class TrackerPublisher:
    """Deliver summaries to Redmine as issues or wiki pages."""

    def __init__(self, config: TrackerConfig, *, session: requests.Session | None = None) -> None:
        self._config = config
        self._base_url = config.url
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Content-Type": "application/json",
                API_KEY_HEADER: config.api_key_secret,
            }
        )
        self._timeout = (config.connect_timeout, config.read_timeout)
        self._verify = not config.insecure
        logger.debug(
            "Tracker client ready for {} (api key {}, insecure={})",
            self._base_url,
            mask_secret(config.api_key_secret),
            config.insecure,
        )

    # ------------------------------------------------------------------
    def get_project(self, project_id: int) -> ProjectInfo:
        data = self._request("GET", f"/projects/{project_id}.json")
        project = data.get("project") if isinstance(data, dict) else None
        if not isinstance(project, dict) or "identifier" not in project:
            raise ResponseParseError(f"Project {project_id} response lacks an identifier", body=str(data))
        return ProjectInfo(
            id=int(project.get("id", project_id)),
            identifier=str(project["identifier"]),
            name=str(project.get("name", "")),
        )

    def create_issue(self, project_id: int, subject: str, body: str) -> IssueRef:
        payload = {
            "issue": {
                "project_id": project_id,
                "subject": subject,
                "description": body,
                "tracker_id": self._config.tracker_id,
            }
        }
        data = self._request("POST", "/issues.json", payload)
        issue = data.get("issue") if isinstance(data, dict) else None
        issue_id = issue.get("id") if isinstance(issue, dict) else None
        logger.info("Created issue {} in project {}: {}", issue_id, project_id, subject)
        return IssueRef(id=issue_id, subject=subject)

    def find_wiki_page(self, project_identifier: str, title: str) -> WikiRef | None:
        """Return the page reference, or ``None`` when the page does not exist."""

        response = self._send("GET", self._wiki_path(project_identifier, title))
        if response.status_code == 404:
            return None
        data = self._decode(response, allow_empty=False)
        page = data.get("wiki_page") if isinstance(data, dict) else None
        version = page.get("version") if isinstance(page, dict) else None
        return WikiRef(project_identifier=project_identifier, title=title, version=version)

    def upsert_wiki_page(self, project_id: int, title: str, body: str, change_note: str = "") -> WikiRef:
        """Create the page, or update it when it already exists.

        Both branches issue the same ``PUT``; the existence probe only decides
        how the result is reported.
        """

        project = self.get_project(project_id)
        existing = self.find_wiki_page(project.identifier, title)
        payload = {"wiki_page": {"text": body, "comments": change_note}}
        data = self._request("PUT", self._wiki_path(project.identifier, title), payload)

        page = data.get("wiki_page") if isinstance(data, dict) else None
        version = page.get("version") if isinstance(page, dict) else None
        if version is None and existing is not None and existing.version is not None:
            version = existing.version + 1
        logger.info(
            "{} wiki page {} in project {}",
            "Updated" if existing is not None else "Created",
            title,
            project.identifier,
        )
        return WikiRef(
            project_identifier=project.identifier,
            title=title,
            version=version,
            created=existing is None,
        )

    # ------------------------------------------------------------------
    def test_connectivity(self) -> ConnectivityResult:
        """Issue one cheap authenticated read; failures are reported, never raised."""

        try:
            data = self._request("GET", "/users/current.json")
        except RedsumError as exc:
            logger.warning("Tracker connectivity test failed: {}", exc)
            return ConnectivityResult(ok=False, message=str(exc))
        user = data.get("user") if isinstance(data, dict) else None
        login = user.get("login") if isinstance(user, dict) else None
        message = f"Connected to {self._base_url} as {login}" if login else f"Connected to {self._base_url}"
        return ConnectivityResult(ok=True, message=message)

    def diagnose_url_reachability(self) -> dict[str, ProbeResult]:
        """Probe the configured URL and the same host with the opposite scheme.

        Probes always skip TLS verification and use their own short timeouts.
        Probe requests carry no API key.
        """

        variants: dict[str, str] = {"configured": self._base_url}
        alternate = _swap_scheme(self._base_url)
        if alternate is not None:
            variants["alternate_scheme"] = alternate

        results: dict[str, ProbeResult] = {}
        for label, url in variants.items():
            results[label] = self._probe(url)
            logger.info("Probe {} -> {}", url, results[label])
        return results

    # ------------------------------------------------------------------
    def _probe(self, url: str) -> ProbeResult:
        started = time.monotonic()
        try:
            response = requests.get(url, timeout=PROBE_TIMEOUT, verify=False, allow_redirects=True)
        except requests.RequestException as exc:
            return ProbeResult(url=url, ok=False, error=str(exc), elapsed_ms=_elapsed_ms(started))
        return ProbeResult(
            url=url,
            ok=200 <= response.status_code < 400,
            status=response.status_code,
            elapsed_ms=_elapsed_ms(started),
        )

    def _wiki_path(self, project_identifier: str, title: str) -> str:
        return f"/projects/{quote(project_identifier, safe='')}/wiki/{quote(title, safe='')}.json"

    def _send(self, method: str, path: str, payload: dict[str, Any] | None = None) -> requests.Response:
        url = f"{self._base_url}{path}"
        logger.debug("{} {}", method, url)
        try:
            return self._session.request(
                method,
                url,
                json=payload,
                timeout=self._timeout,
                verify=self._verify,
            )
        except requests.RequestException as exc:
            raise TrackerApiError(f"Tracker request {method} {path} failed: {exc}", status=0, body="") from exc

    def _request(self, method: str, path: str, payload: dict[str, Any] | None = None) -> dict[str, Any]:
        response = self._send(method, path, payload)
        return self._decode(response, allow_empty=method.upper() != "GET")

    def _decode(self, response: requests.Response, *, allow_empty: bool) -> dict[str, Any]:
        body = response.text or ""
        if not 200 <= response.status_code < 300:
            raise TrackerApiError("Tracker API error", status=response.status_code, body=body)
        if not body.strip():
            if allow_empty:
                return {}
            raise ResponseParseError("Tracker API returned an empty body", body=body)
        try:
            data = response.json()
        except ValueError as exc:
            raise ResponseParseError(f"Tracker API returned malformed JSON: {exc}", body=body) from exc
        return data if isinstance(data, dict) else {"data": data}


def _swap_scheme(url: str) -> str | None:
    parts = urlsplit(url)
    if parts.scheme == "https":
        return urlunsplit(parts._replace(scheme="http"))
    if parts.scheme == "http":
        return urlunsplit(parts._replace(scheme="https"))
    return None


def _elapsed_ms(started: float) -> float:
    return round((time.monotonic() - started) * 1000, 1)


__all__ = ["API_KEY_HEADER", "PROBE_TIMEOUT", "TrackerPublisher"]
