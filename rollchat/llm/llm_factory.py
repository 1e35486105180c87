import importlib
from typing import Any

from omegaconf import OmegaConf, DictConfig
from langchain_core.language_models.chat_models import BaseChatModel


class LLMFactory:
    """
    Builds the chat clients named in `llms.yaml`.

    rollchat uses two providers: one for the conversation turns and a fixed
    one for rolling summaries. Each entry names a chat-model class by dotted
    path and the keyword arguments to construct it with.
    """

    def __init__(self, llm_config: DictConfig):
        if not isinstance(llm_config, DictConfig) or not isinstance(llm_config.get('llm_providers'), DictConfig):
            raise ValueError("LLM config must contain an 'llm_providers' mapping.")
        self._providers = llm_config.llm_providers

    def create_llm_client(self, provider_key: str, **param_overrides: Any) -> BaseChatModel:
        """
        Instantiates the client for `provider_key`.

        Overrides with a None value are ignored, so an unset `--model` keeps
        the configured model.
        """
        if provider_key not in self._providers:
            raise ValueError(f"Provider '{provider_key}' not found in llms.yaml "
                             f"(configured: {list(self._providers.keys())})")

        provider = self._providers[provider_key]
        if 'class' not in provider or 'params' not in provider:
            raise ValueError(f"Provider '{provider_key}' needs both 'class' and 'params'.")

        params = OmegaConf.to_container(provider.params, resolve=True)
        params.update({k: v for k, v in param_overrides.items() if v is not None})

        client_class = self._import_class(provider['class'], provider_key)
        try:
            return client_class(**params)
        except TypeError as e:
            raise TypeError(f"Parameters for '{provider_key}' do not match {provider['class']}: {e}") from e

    @staticmethod
    def _import_class(dotted_path: str, provider_key: str) -> type:
        module_path, class_name = dotted_path.rsplit('.', 1)
        try:
            return getattr(importlib.import_module(module_path), class_name)
        except ImportError as e:
            raise ImportError(f"Cannot import '{module_path}' for provider '{provider_key}'.") from e
        except AttributeError as e:
            raise AttributeError(f"'{module_path}' has no chat model class '{class_name}'.") from e
