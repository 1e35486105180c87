import pytest

from rollchat.errors import ConfigError
from rollchat.main import build_parser, main
from rollchat.utils.config_parser import load_app_config, require_credential


def test_packaged_config_is_namespaced_by_file() -> None:
    config = load_app_config()

    assert config.app.chat.default_model == "gpt-3.5-turbo"
    assert config.app.summarizer.provider_key == "openai-summarizer"
    providers = config.llms.llm_providers
    assert set(providers.keys()) == {"openai-chat", "openai-summarizer"}
    assert providers["openai-summarizer"].params.model == "gpt-4o"


def test_api_key_is_resolved_from_the_environment(monkeypatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    config = load_app_config()
    assert config.llms.llm_providers["openai-chat"].params.api_key == "sk-test"


def test_missing_config_directory_is_a_config_error(tmp_path) -> None:
    with pytest.raises(ConfigError):
        load_app_config(tmp_path / "nowhere")


def test_credential_is_required() -> None:
    config = load_app_config()
    assert require_credential(config, {"OPENAI_API_KEY": "sk-test"}) == "sk-test"
    with pytest.raises(ConfigError, match="OPENAI_API_KEY"):
        require_credential(config, {})
    with pytest.raises(ConfigError):
        require_credential(config, {"OPENAI_API_KEY": "  "})


def test_cli_defaults() -> None:
    args = build_parser().parse_args([])
    assert args.model == "gpt-3.5-turbo"
    assert args.debug is False

    args = build_parser().parse_args(["--model", "gpt-4o-mini", "-d"])
    assert args.model == "gpt-4o-mini"
    assert args.debug is True


def test_missing_credential_exits_with_failure(monkeypatch, capsys) -> None:
    monkeypatch.setattr("rollchat.main.load_environment", lambda: None)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    assert main([]) == 1
    assert "OPENAI_API_KEY environment variable not set" in capsys.readouterr().err
