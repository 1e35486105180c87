import os
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv
from omegaconf import DictConfig, OmegaConf

from rollchat.errors import ConfigError


def find_project_root(marker: str = "pyproject.toml") -> Path:
    """
    Finds the project root by searching upwards for a marker file.

    This function starts from the current file's location and traverses up
    the directory tree until it finds a directory containing the specified
    marker file.

    Args:
        marker: The name of the marker file to find (e.g., 'pyproject.toml').

    Returns:
        The Path object representing the project root directory.

    Raises:
        FileNotFoundError: If the project root cannot be found by traversing
                           up from the current file's location.
    """
    current_path = Path(__file__).resolve()
    while current_path != current_path.parent:  # Stop at the filesystem root
        if (current_path / marker).exists():
            return current_path
        current_path = current_path.parent

    raise FileNotFoundError(
        f"Could not find the project root. "
        f"Searched for a '{marker}' file from '{Path(__file__).resolve()}' upwards."
    )


# --- Application-wide Constants ---

# Config and prompts ship inside the package so they resolve for installed copies too.
PACKAGE_ROOT = Path(__file__).resolve().parent.parent
CONFIG_DIR = PACKAGE_ROOT / "config"
PROMPTS_DIR = PACKAGE_ROOT / "prompts"


def load_environment() -> None:
    """
    Loads a `.env` file into the process environment without overriding
    variables that are already set. The project root is searched first,
    falling back to the current working directory.
    """
    try:
        env_dir = find_project_root()
    except FileNotFoundError:
        env_dir = Path.cwd()
    load_dotenv(env_dir / ".env")


def load_app_config(config_dir: Optional[Path] = None) -> DictConfig:
    """
    Loads all YAML configuration files from a directory into a single,
    namespaced OmegaConf DictConfig object.

    Each YAML file is loaded under a key corresponding to its filename stem.
    For example, `llms.yaml` will be accessible under the `llms` key in the
    returned config object.

    It also registers a resolver to read environment variables with `${env:VAR_NAME}`.

    Args:
        config_dir: The configuration directory. Defaults to the packaged config.

    Returns:
        A single, merged OmegaConf DictConfig object containing all configurations.

    Raises:
        ConfigError: If the directory does not exist or a file cannot be parsed.
    """
    if not OmegaConf.has_resolver("env"):
        OmegaConf.register_new_resolver("env", lambda name: os.environ.get(name))

    config_path = Path(config_dir) if config_dir is not None else CONFIG_DIR
    if not config_path.is_dir():
        raise ConfigError(f"Configuration directory not found at '{config_path.resolve()}'")

    merged_config = OmegaConf.create()

    for p in sorted(config_path.glob("*.yaml")):
        key = p.stem  # 'llms.yaml' -> 'llms'
        try:
            merged_config[key] = OmegaConf.load(p)
        except Exception as e:
            raise ConfigError(f"Failed to load or parse configuration file '{p.name}': {e}") from e

    return merged_config


def require_credential(app_config: DictConfig, environ: Optional[Mapping[str, str]] = None) -> str:
    """
    Returns the API key named by `app.chat.credential_env`.

    Raises:
        ConfigError: If the variable is unset or empty.
    """
    source = environ if environ is not None else os.environ
    var_name = app_config.app.chat.credential_env
    api_key = source.get(var_name, "")
    if not api_key.strip():
        raise ConfigError(f"{var_name} environment variable not set")
    return api_key
