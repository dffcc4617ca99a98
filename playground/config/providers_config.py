"""
Provider catalog for the playground.

This module contains the static description of every supported provider and
its models. It should be importable without triggering any side effects.
"""

# Models that don't support system prompts
NO_SYSTEM_PROMPT_MODELS = ["o1", "o1-mini"]

# Models that don't support streaming
NO_STREAMING_MODELS = ["o1"]

MODEL_TAGS = [
    "reasoning",
    "vision",
    "long-context",
    "fast",
    "image-generation",
    "web-search",
    "code",
]

TAG_LABELS = {
    "reasoning": "Reasoning",
    "vision": "Vision",
    "long-context": "Long Context",
    "fast": "Fast",
    "image-generation": "Image Gen",
    "web-search": "Web Search",
    "code": "Code",
}

PROVIDERS = [
    {
        "id": "openai",
        "name": "OpenAI",
        "base_url": "https://api.openai.com/v1",
        "requires_key": True,
        "supports_models_endpoint": True,
        "docs_url": "https://platform.openai.com/api-keys",
        "key_label": "OpenAI API Key",
        "models": [
            {"id": "gpt-4o", "name": "GPT-4o", "tags": ["vision"], "context_window": 128000},
            {"id": "gpt-4o-mini", "name": "GPT-4o Mini", "tags": ["vision", "fast"], "context_window": 128000},
            {"id": "gpt-4.1", "name": "GPT-4.1", "tags": ["vision"], "context_window": 1000000},
            {"id": "gpt-4.1-mini", "name": "GPT-4.1 Mini", "tags": ["vision", "fast"], "context_window": 1000000},
            {"id": "gpt-4.1-nano", "name": "GPT-4.1 Nano", "tags": ["fast"], "context_window": 1000000},
            {"id": "o1", "name": "o1", "tags": ["reasoning"], "context_window": 200000},
            {"id": "o1-mini", "name": "o1 Mini", "tags": ["reasoning", "fast"], "context_window": 128000},
            {"id": "o3", "name": "o3", "tags": ["reasoning"], "context_window": 200000},
            {"id": "o3-mini", "name": "o3 Mini", "tags": ["reasoning", "fast"], "context_window": 200000},
            {"id": "o4-mini", "name": "o4 Mini", "tags": ["reasoning", "fast"], "context_window": 200000},
            {"id": "gpt-image-1", "name": "GPT Image 1", "tags": ["image-generation"]},
        ],
    },
    {
        "id": "anthropic",
        "name": "Anthropic",
        "base_url": "https://api.anthropic.com/v1",
        "requires_key": True,
        "extra_headers": {"anthropic-version": "2023-06-01"},
        "auth_header": "x-api-key",
        "auth_prefix": "",
        "supports_models_endpoint": False,
        "docs_url": "https://console.anthropic.com/settings/keys",
        "key_label": "Anthropic API Key",
        "models": [
            {"id": "claude-opus-4-5", "name": "Claude Opus 4.5", "tags": ["vision", "long-context"], "context_window": 200000},
            {"id": "claude-sonnet-4-5", "name": "Claude Sonnet 4.5", "tags": ["vision", "long-context"], "context_window": 200000},
            {"id": "claude-haiku-4-5", "name": "Claude Haiku 4.5", "tags": ["vision", "fast"], "context_window": 200000},
        ],
    },
    {
        "id": "gemini",
        "name": "Google Gemini",
        "base_url": "https://generativelanguage.googleapis.com/v1beta/openai/",
        "requires_key": True,
        "supports_models_endpoint": False,
        "docs_url": "https://aistudio.google.com/app/apikey",
        "key_label": "Google AI API Key",
        "models": [
            {"id": "gemini-2.0-flash", "name": "Gemini 2.0 Flash", "tags": ["vision", "fast"], "context_window": 1000000},
            {"id": "gemini-2.0-flash-lite", "name": "Gemini 2.0 Flash Lite", "tags": ["fast"], "context_window": 1000000},
            {"id": "gemini-2.5-pro", "name": "Gemini 2.5 Pro", "tags": ["reasoning", "vision", "long-context"], "context_window": 2000000},
        ],
    },
    {
        "id": "mistral",
        "name": "Mistral",
        "base_url": "https://api.mistral.ai/v1",
        "requires_key": True,
        "supports_models_endpoint": True,
        "docs_url": "https://console.mistral.ai/api-keys",
        "key_label": "Mistral API Key",
        "models": [
            {"id": "mistral-large-latest", "name": "Mistral Large", "tags": ["vision"], "context_window": 128000},
            {"id": "mistral-small-latest", "name": "Mistral Small", "tags": ["fast"], "context_window": 128000},
            {"id": "codestral-latest", "name": "Codestral", "tags": ["code"], "context_window": 256000},
            {"id": "pixtral-large-latest", "name": "Pixtral Large", "tags": ["vision"], "context_window": 128000},
        ],
    },
    {
        "id": "xai",
        "name": "xAI (Grok)",
        "base_url": "https://api.x.ai/v1",
        "requires_key": True,
        "supports_models_endpoint": True,
        "docs_url": "https://console.x.ai/",
        "key_label": "xAI API Key",
        "models": [
            {"id": "grok-3", "name": "Grok 3", "tags": ["web-search"], "context_window": 131072},
            {"id": "grok-3-mini", "name": "Grok 3 Mini", "tags": ["fast", "reasoning"], "context_window": 131072},
            {"id": "grok-2-vision", "name": "Grok 2 Vision", "tags": ["vision"], "context_window": 32768},
        ],
    },
    {
        "id": "groq",
        "name": "Groq",
        "base_url": "https://api.groq.com/openai/v1",
        "requires_key": True,
        "supports_models_endpoint": True,
        "docs_url": "https://console.groq.com/keys",
        "key_label": "Groq API Key",
        "models": [
            {"id": "llama-3.3-70b-versatile", "name": "Llama 3.3 70B", "tags": ["fast"], "context_window": 128000},
            {"id": "deepseek-r1-distill-llama-70b", "name": "DeepSeek R1 Llama 70B", "tags": ["reasoning", "fast"], "context_window": 128000},
            {"id": "mixtral-8x7b-32768", "name": "Mixtral 8x7B", "tags": ["fast"], "context_window": 32768},
        ],
    },
    {
        "id": "cohere",
        "name": "Cohere",
        "base_url": "https://api.cohere.com/compatibility/v1",
        "requires_key": True,
        "supports_models_endpoint": False,
        "docs_url": "https://dashboard.cohere.com/api-keys",
        "key_label": "Cohere API Key",
        "models": [
            {"id": "command-r-plus", "name": "Command R+", "tags": ["long-context"], "context_window": 128000},
            {"id": "command-r", "name": "Command R", "tags": ["fast"], "context_window": 128000},
            {"id": "command", "name": "Command", "tags": [], "context_window": 4096},
        ],
    },
    {
        "id": "together",
        "name": "Together AI",
        "base_url": "https://api.together.xyz/v1",
        "requires_key": True,
        "supports_models_endpoint": True,
        "docs_url": "https://api.together.ai/settings/api-keys",
        "key_label": "Together AI API Key",
        "models": [
            {"id": "meta-llama/Llama-3.3-70B-Instruct-Turbo", "name": "Llama 3.3 70B Turbo", "tags": ["fast"], "context_window": 131072},
            {"id": "mistralai/Mixtral-8x7B-Instruct-v0.1", "name": "Mixtral 8x7B", "tags": [], "context_window": 32768},
            {"id": "deepseek-ai/DeepSeek-R1", "name": "DeepSeek R1", "tags": ["reasoning"], "context_window": 65536},
        ],
    },
    {
        "id": "perplexity",
        "name": "Perplexity",
        "base_url": "https://api.perplexity.ai",
        "requires_key": True,
        "supports_models_endpoint": False,
        "docs_url": "https://www.perplexity.ai/settings/api",
        "key_label": "Perplexity API Key",
        "models": [
            {"id": "sonar", "name": "Sonar", "tags": ["web-search", "fast"], "context_window": 127072},
            {"id": "sonar-pro", "name": "Sonar Pro", "tags": ["web-search"], "context_window": 200000},
            {"id": "sonar-reasoning", "name": "Sonar Reasoning", "tags": ["web-search", "reasoning"], "context_window": 127072},
        ],
    },
    {
        "id": "ollama",
        "name": "Ollama (Local)",
        "base_url": "http://localhost:11434/v1",
        "requires_key": False,
        "supports_models_endpoint": True,
        "docs_url": "https://ollama.com/",
        "key_label": "No key needed",
        "models": [
            {"id": "llama3", "name": "Llama 3", "tags": ["fast"], "context_window": 8192},
            {"id": "mistral", "name": "Mistral 7B", "tags": ["fast"], "context_window": 32768},
            {"id": "codellama", "name": "Code Llama", "tags": ["code"], "context_window": 16384},
        ],
    },
]
