from docexplain.analysis.client_base import BaseAgentClient
from docexplain.analysis.example_client_adapter import ExampleClientAdapter
from docexplain.analysis.mistral_client_adapter import MistralClientAdapter
from docexplain.config.settings import Settings


class AgentClientFactory:
    """Creates the configured agent client adapter."""

    PROVIDERS = ("example", "mistral")

    @classmethod
    def create(cls, settings: Settings) -> BaseAgentClient:
        provider = settings.agent_provider.lower()
        if provider == "example":
            return ExampleClientAdapter()
        if provider == "mistral":
            return MistralClientAdapter(
                api_key=settings.mistral_api_key,
                base_url=settings.mistral_base_url,
                timeout_seconds=settings.http_timeout_seconds,
            )
        raise ValueError(
            f"Unknown agent provider '{provider}'. Choose from: {list(cls.PROVIDERS)}"
        )

    @classmethod
    def credential_configured(cls, settings: Settings) -> bool:
        """The example provider needs no key; every real provider does."""
        if settings.agent_provider.lower() == "example":
            return True
        return bool(settings.mistral_api_key.strip())
