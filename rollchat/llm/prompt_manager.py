from pathlib import Path
from typing import Optional, Tuple


class PromptManager:
    """
    Reads prompt templates from `rollchat/prompts/<dir>/`.

    The summarizer's directory holds `system.prompt`, `user.prompt` for a
    first summary and `update.prompt` for merging into an existing one.
    """

    def __init__(self, prompts_base_path: Path):
        if not prompts_base_path.is_dir():
            raise FileNotFoundError(f"Prompts directory not found at: {prompts_base_path}")
        self.prompts_base_path = prompts_base_path

    def load_prompt(self, prompts_dir: str, filename: str) -> str:
        """Returns the text of `<prompts_dir>/<filename>`."""
        path = self.prompts_base_path / prompts_dir / filename
        if not path.is_file():
            raise FileNotFoundError(f"Prompt file not found at: {path}")
        try:
            return path.read_text(encoding='utf-8')
        except OSError as e:
            raise IOError(f"Error reading prompt file at {path}: {e}") from e

    def get_standard_prompts(
        self,
        prompts_dir: str,
        system_filename: str = "system.prompt",
        user_filename: str = "user.prompt"
    ) -> Tuple[str, Optional[str]]:
        """
        Loads the system prompt and, when present, the user prompt template.

        A missing user prompt yields None; a missing system prompt raises.
        """
        system_prompt = self.load_prompt(prompts_dir, system_filename)
        try:
            user_prompt = self.load_prompt(prompts_dir, user_filename)
        except FileNotFoundError:
            user_prompt = None
        return system_prompt, user_prompt
