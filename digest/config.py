"""Key resolution, paths, constants, and setup wizard."""

import json
import os
import sys
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigError

# ─────────────────────────────────────────────────────
# App home directory: config and logs live here
# ─────────────────────────────────────────────────────
APP_DIR = Path.home() / ".qiita-room-digest"
LOGS_DIR = APP_DIR / "logs"
CONFIG_FILE = APP_DIR / "config.json"

# ─────────────────────────────────────────────────────
# Search constants
# ─────────────────────────────────────────────────────
QIITA_API_URL = "https://qiita.com/api/v2"
CHATWORK_API_URL = "https://api.chatwork.com/v2"
PER_PAGE = 30
MIN_STOCKS = 30
PAGE_BUDGET = 4

# ─────────────────────────────────────────────────────
# Registration constants
# ─────────────────────────────────────────────────────
DEFAULT_PRIORITY = 3  # "normal" interest strength
MAX_INTERESTS = 20

DEFAULT_BASE_URL = "http://localhost:8080"
DEFAULT_PORT = 8082
REQUEST_TIMEOUT = 10


# ─────────────────────────────────────────────────────
# Utilities
# ─────────────────────────────────────────────────────
def write_secret_file(path: Path, content: str):
    """Write a file with 0600 permissions (owner read/write only).

    Uses os.open() with explicit mode to avoid a TOCTOU race where the file
    briefly exists with default (world-readable) permissions.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(str(path), os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w") as f:
        f.write(content)


# ─────────────────────────────────────────────────────
# Key resolution: env, then config.json
# ─────────────────────────────────────────────────────
def _get_key(name: str) -> str:
    """Resolve a key: environment variable first, then config.json."""
    val = os.environ.get(name)
    if val:
        return val
    if CONFIG_FILE.exists():
        try:
            cfg = json.loads(CONFIG_FILE.read_text())
            val = cfg.get(name)
            if val:
                return str(val)
        except Exception:
            pass
    return ""


def load_config() -> dict:
    """Load the full config.json."""
    if CONFIG_FILE.exists():
        try:
            return json.loads(CONFIG_FILE.read_text())
        except Exception:
            pass
    return {}


def save_config(config: dict):
    """Save config.json with restricted permissions."""
    APP_DIR.mkdir(parents=True, exist_ok=True)
    write_secret_file(CONFIG_FILE, json.dumps(config, indent=2))


@dataclass
class Settings:
    """Everything the bot needs to talk to the outside world.

    Built once at the edge (CLI / web app) and handed to constructors, so the
    selection engine never looks at the process environment.
    """

    qiita_token: str = ""
    supabase_url: str = ""
    supabase_key: str = ""
    chatwork_token: str = ""
    gemini_key: str = ""
    anthropic_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    port: int = DEFAULT_PORT
    request_timeout: float = REQUEST_TIMEOUT
    page_budget: int = PAGE_BUDGET

    @classmethod
    def from_env(cls) -> "Settings":
        port = _get_key("PORT")
        return cls(
            qiita_token=_get_key("QIITA_ACCESS_TOKEN"),
            supabase_url=_get_key("SUPABASE_URL").rstrip("/"),
            supabase_key=_get_key("SUPABASE_KEY"),
            chatwork_token=_get_key("CHATWORK_API_TOKEN"),
            gemini_key=_get_key("GEMINI_API_KEY"),
            anthropic_key=_get_key("ANTHROPIC_API_KEY"),
            base_url=(_get_key("BASE_URL") or DEFAULT_BASE_URL).rstrip("/"),
            port=int(port) if port.isdigit() else DEFAULT_PORT,
        )

    def missing(self) -> list[str]:
        """Names of required keys that are not set."""
        required = {
            "QIITA_ACCESS_TOKEN": self.qiita_token,
            "SUPABASE_URL": self.supabase_url,
            "SUPABASE_KEY": self.supabase_key,
            "CHATWORK_API_TOKEN": self.chatwork_token,
        }
        names = [name for name, val in required.items() if not val]
        if not (self.gemini_key or self.anthropic_key):
            names.append("GEMINI_API_KEY or ANTHROPIC_API_KEY")
        return names

    def require(self):
        """Raise ConfigError listing every missing key."""
        names = self.missing()
        if names:
            raise ConfigError(
                "Missing configuration: " + ", ".join(names) + "\n"
                f"Set them in the environment or {CONFIG_FILE} (python -m digest setup)"
            )


# ─────────────────────────────────────────────────────
# Interactive setup
# ─────────────────────────────────────────────────────
_SETUP_PROMPTS = [
    ("QIITA_ACCESS_TOKEN", "Qiita access token (required — article search)",
     "https://qiita.com/settings/applications"),
    ("SUPABASE_URL", "Supabase project URL (required — rooms, interests, history)", ""),
    ("SUPABASE_KEY", "Supabase API key (required)", ""),
    ("CHATWORK_API_TOKEN", "Chatwork API token (required — posting to rooms)",
     "https://www.chatwork.com/service/packages/chatwork/subpackages/api/token.php"),
    ("GEMINI_API_KEY", "Google Gemini API key (summaries; press Enter to use Claude instead)",
     "https://aistudio.google.com/apikey"),
    ("ANTHROPIC_API_KEY", "Anthropic API key (optional — summary fallback)",
     "https://console.anthropic.com/settings/keys"),
    ("BASE_URL", f"Public base URL for save links (default {DEFAULT_BASE_URL})", ""),
]


def run_setup():
    """Interactive first-run setup; saves config.json."""
    print("\n" + "=" * 60)
    print("  Qiita Room Digest — Setup")
    print("=" * 60)
    print(f"\nKeys are saved to {CONFIG_FILE}\n")

    config = load_config()
    for i, (name, label, link) in enumerate(_SETUP_PROMPTS, 1):
        print(f"{i}. {label}")
        if link:
            print(f"   {link}")
        current = " (press Enter to keep current)" if config.get(name) else ""
        val = input(f"   {name}{current}: ").strip()
        if val:
            config[name] = val
        print()

    save_config(config)
    print(f"  Config saved to {CONFIG_FILE}")
    print("\n  Setup complete! Run `python -m digest run` to deliver articles.\n")
    sys.exit(0)
