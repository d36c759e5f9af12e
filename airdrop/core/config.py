import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """
    Runtime configuration read from the environment (and a .env file, if present).
    """

    def __init__(self):
        self.database_url: str = os.getenv("DATABASE_URL") or "sqlite:///./database.db"
        self.db_echo: bool = _flag("DB_ECHO")

        self.bot_token: Optional[str] = os.getenv("BOT_TOKEN")
        self.bot_username: str = os.getenv("BOT_USERNAME", "cryptoairdropbot")
        self.dev_mode: bool = _flag("DEV_MODE")
        self.admin_password: Optional[str] = os.getenv("ADMIN_PASSWORD")

        self.referral_reward: int = int(os.getenv("REFERRAL_REWARD", "40"))
        self.wallet_link_reward: int = int(os.getenv("WALLET_LINK_REWARD", "200"))
        self.level_step: int = int(os.getenv("LEVEL_STEP", "1000"))
        self.seed_default_tasks: bool = _flag("SEED_DEFAULT_TASKS", "true")


settings = Settings()
