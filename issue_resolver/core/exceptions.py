"""Error taxonomy for model selection and task dispatch"""

from typing import Optional


class IssueResolverError(Exception):
    """Base class for all issue resolver errors"""


class NotFoundError(IssueResolverError, LookupError):
    """A model or task name is absent from its registry"""

    def __init__(self, kind: str, name: str):
        self.kind = kind
        self.name = name
        super().__init__(f"{kind.capitalize()} '{name}' not found")


class ProviderNotConfiguredError(IssueResolverError):
    """A model is registered but its provider adapter was never attached"""

    def __init__(self, provider: str, model: Optional[str] = None):
        self.provider = provider
        self.model = model
        message = f"Provider '{provider}' not configured"
        if model:
            message += f" (required by model '{model}')"
        super().__init__(message)


class ProviderCallError(IssueResolverError):
    """The provider adapter's underlying call failed"""

    def __init__(self, provider: str, model: str, message: str):
        self.provider = provider
        self.model = model
        super().__init__(f"{provider} request for '{model}' failed: {message}")


class ResponseParseError(IssueResolverError, ValueError):
    """A model reply could not be interpreted as structured data"""

    def __init__(self, message: str, content: str = ""):
        self.content = content
        super().__init__(message)


class ConfigurationError(IssueResolverError):
    """Startup configuration is unusable"""
