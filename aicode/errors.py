"""
Exceptions raised by the assistant. The CLI catches them once at the top level,
prints the message and exits with a non-zero status.
"""

from typing import Iterable


class AssistantError(Exception):
    """Base class for every error the assistant reports to the user."""


class MissingDependency(AssistantError):
    def __init__(self, programs: Iterable[str]):
        self.programs = list(programs)
        super().__init__(
            f"Missing required dependencies: {' '.join(self.programs)}. "
            "Install them and make sure they are in your PATH."
        )


class ConfigError(AssistantError):
    pass


class MissingRequiredSetting(ConfigError):
    """A required setting is absent after merging every configuration source."""

    _GUIDANCE = {
        "endpoint": "API endpoint is required. Use --endpoint, set API_ENDPOINT or run --setup.",
        "api_key": "API key is required. Use --key, set the COPILOT_KEY environment variable, or run --setup.",
        "assistant_id": "Assistant id is required for the assistant API. Use --assistant-id or set ASSISTANT_ID.",
    }

    def __init__(self, setting: str):
        self.setting = setting
        super().__init__(self._GUIDANCE.get(setting, f"Setting '{setting}' is required."))


class InvalidSetting(ConfigError):
    def __init__(self, setting: str, value, reason: str):
        self.setting = setting
        self.value = value
        super().__init__(f"Invalid value for {setting}: {value!r} ({reason})")


class TransportFailure(AssistantError):
    """The request never produced an HTTP response (DNS, refused connection, TLS...)."""


class HTTPError(AssistantError):
    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"HTTP {status_code}: {message}")
