"""
Tool elicitation block extraction.

A block is a fenced code block tagged tool_elicit holding a JSON object:

    ```tool_elicit
    {"tool": "calculator", "params": {"expression": "2+2"}, "reason": "..."}
    ```

Blocks with malformed JSON or without a string "tool" field are skipped.
"""
import json
import re
from typing import List

from playground.models.parsed import ToolElicitRequest
from playground.utils.logging_utils import logger

TOOL_ELICIT_PATTERN = re.compile(r"```tool_elicit\r?\n([\s\S]*?)```")


def extract_tool_requests(text: str) -> List[ToolElicitRequest]:
    requests = []
    for match in TOOL_ELICIT_PATTERN.finditer(text):
        try:
            payload = json.loads(match.group(1))
        except json.JSONDecodeError:
            logger.debug("Skipping tool_elicit block with invalid JSON")
            continue
        if not isinstance(payload, dict) or not isinstance(payload.get("tool"), str):
            continue

        params = payload.get("params")
        reason = payload.get("reason")
        requests.append(ToolElicitRequest(
            tool=payload["tool"],
            params=params if isinstance(params, dict) else {},
            reason=reason if isinstance(reason, str) else None,
        ))
    return requests
