"""
General application configuration for the playground.

This module contains application-wide settings that are not specific to providers or models.
"""
import os

# Server configuration
DEFAULT_PORT = 8765
DEFAULT_HOST = "127.0.0.1"

# Upper bound on automatic tool-result follow-up turns within one user turn
MAX_TOOL_HOPS = int(os.getenv('PLAYGROUND_MAX_TOOL_HOPS', '8'))

# Transport timeout applied to every provider request
REQUEST_TIMEOUT_SECONDS = float(os.getenv('PLAYGROUND_REQUEST_TIMEOUT', '60'))

DEFAULT_CONVERSATION_TITLE = "New Conversation"
TITLE_MAX_LENGTH = 60

DEFAULT_SETTINGS = {
    "selectedProviderId": "openai",
    "selectedModelId": "gpt-4o",
    "systemPrompt": "",
    "params": {
        "temperature": 0.7,
        "maxTokens": 2048,
        "topP": 1.0,
        "frequencyPenalty": 0.0,
        "presencePenalty": 0.0,
    },
    "enabledToolNames": [],
    "agenticMode": "none",
    "maxToolHops": MAX_TOOL_HOPS,
    "confirmToolRuns": True,
}
