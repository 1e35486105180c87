import sys
from pathlib import Path

# --- PATH SETUP ---
# Allow running from a source checkout without installing the package
project_root = Path(__file__).resolve().parent
sys.path.insert(0, str(project_root))

from rollchat.main import main


if __name__ == "__main__":
    raise SystemExit(main())
