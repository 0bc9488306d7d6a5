"""LogicValidator backed by the serverless ``/api/generate`` proxy.

The proxy accepts ``{"task", "params": {"contents", "config"}, "model"}`` and
answers ``{"text": ...}`` on success or ``{"error", "details"}`` with a
non-2xx status on failure.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any

import httpx

from plcortex.validation.issues import (
    LogicIssue,
    ValidatorError,
    clean_suggestion,
    parse_issues,
)

logger = logging.getLogger(__name__)

VALIDATE_TASK = "validatePlcLogic"
SUGGEST_TASK = "suggestPlcLogicFix"

_VALIDATE_PROMPT = """\
You review simplified PLC instruction-list programs. Each line holds XIC(tag) / \
XIO(tag) conditions, optional parallel groups written [cond, cond], and exactly \
one OTE(tag), OTL(tag) or OTU(tag) action. Reply with a JSON array only, one \
object per problem: {{"line": <number>, "type": "Error"|"Warning"|"Info", \
"message": <text>}}. Reply [] when the program is sound.

Program:
{code}
"""

_SUGGEST_PROMPT = """\
Rewrite this simplified PLC instruction-list program so that the listed issues \
are resolved. Reply with the corrected program text only.

Program:
{code}

Issues:
{issues}
"""


class GenerateEndpointValidator:
    """Validate and repair programs through the generation proxy.

    Args:
        url: Absolute URL of the proxy endpoint.
        timeout: Per-request timeout in seconds.
        model: Model name forwarded to the proxy; None lets it choose.
        client: Shared AsyncClient. When omitted, one is opened per call.
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 60.0,
        model: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not url:
            raise ValueError("url must not be empty")
        if timeout <= 0:
            raise ValueError("timeout must be > 0")
        self.url = url
        self.timeout = timeout
        self.model = model
        self._client = client

    async def validate(self, source: str) -> list[LogicIssue]:
        text = await self._generate(
            VALIDATE_TASK,
            _VALIDATE_PROMPT.format(code=source),
            config={"responseMimeType": "application/json"},
        )
        return parse_issues(text)

    async def suggest_fix(self, source: str, issues: Sequence[LogicIssue]) -> str:
        issue_text = json.dumps([issue.to_dict() for issue in issues], indent=2)
        text = await self._generate(
            SUGGEST_TASK, _SUGGEST_PROMPT.format(code=source, issues=issue_text)
        )
        return clean_suggestion(text)

    async def _generate(
        self, task: str, contents: str, *, config: dict[str, Any] | None = None
    ) -> str:
        params: dict[str, Any] = {"contents": contents}
        if config:
            params["config"] = config
        body: dict[str, Any] = {"task": task, "params": params}
        if self.model:
            body["model"] = self.model

        try:
            if self._client is not None:
                response = await self._client.post(self.url, json=body, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.url, json=body)
        except httpx.HTTPError as exc:
            logger.warning(f"Generation request for task '{task}' failed: {exc}")
            raise ValidatorError("Failed to get a response from the server.") from exc

        if response.is_error:
            detail = _error_detail(response)
            logger.warning(f"Generation proxy returned {response.status_code} for task '{task}'")
            raise ValidatorError(f"API Error: {response.status_code} - {detail}")

        try:
            data = response.json()
        except ValueError as exc:
            raise ValidatorError(f"Proxy answered with invalid JSON: {exc}") from exc
        text = data.get("text") if isinstance(data, dict) else None
        return text or ""


def _error_detail(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return "Unknown API error"
    if not isinstance(data, dict):
        return "Unknown API error"
    return str(data.get("details") or data.get("error") or "Unknown API error")
