import os
from pathlib import Path

from dotenv import load_dotenv

# Carrega o .env da raiz do projeto
load_dotenv()

ENV = os.getenv("ENV", "dev")
ENV_NORMALIZED = ENV.lower()
IS_PROD = ENV_NORMALIZED in {"prod", "production"}

PROJECT_ROOT = Path(__file__).resolve().parents[2]

# No Render o disco persistente é montado em RENDER_DISK_PATH.
PERSISTENT_DATA_PATH = Path(os.getenv("RENDER_DISK_PATH", str(PROJECT_ROOT)))

# Cada subdiretório é um estabelecimento (tenant) com seu menu.json.
ESTABLISHMENTS_PATH = Path(
    os.getenv("ESTABLISHMENTS_PATH", str(PERSISTENT_DATA_PATH / "establishments"))
)

DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{PERSISTENT_DATA_PATH / 'zappi.db'}")

COOLDOWN_SECONDS = int(os.getenv("COOLDOWN_SECONDS", "300"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
PORT = int(os.getenv("PORT", "3000"))

META_API_VERSION = os.getenv("META_API_VERSION", "v19.0")
WHATSAPP_VERIFY_TOKEN = os.getenv("WHATSAPP_VERIFY_TOKEN", "").strip()

MENU_FILENAME = "menu.json"
WHATSAPP_CONFIG_FILENAME = "whatsapp.json"
