# config.py

import os

from dotenv import load_dotenv

from exceptions import ConfigurationError

# Load environment variables from .env file
load_dotenv()


class Config:
    # YouTrack API Configuration
    YOUTRACK_TOKEN = os.getenv("YOUTRACK_TOKEN")
    YOUTRACK_BASE_URL = os.getenv("YOUTRACK_BASE_URL")

    # Azure DevOps API Configuration
    ADO_PAT = os.getenv("ADO_PAT")
    ADO_BASE_URL = os.getenv("ADO_BASE_URL", "https://dev.azure.com")
    ADO_API_VERSION = "7.0"
    ADO_COMMENTS_API_VERSION = "7.0-preview.3"

    # Anthropic Configuration
    ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY")
    ANTHROPIC_MODEL = os.getenv("ANTHROPIC_MODEL", "claude-sonnet-4-20250514")
    ANALYSIS_MAX_TOKENS = int(os.getenv("ANALYSIS_MAX_TOKENS", 16000))
    ASK_MAX_TOKENS = int(os.getenv("ASK_MAX_TOKENS", 4000))

    # Google Chat Configuration
    CHAT_MAX_PAGES = int(os.getenv("CHAT_MAX_PAGES", 10))
    CHAT_PAGE_SIZE = int(os.getenv("CHAT_PAGE_SIZE", 100))

    # History Storage
    HISTORY_FILE = os.getenv("HISTORY_FILE", "history.json")
    MAX_HISTORY = int(os.getenv("MAX_HISTORY", 50))

    # Request Settings
    MAX_RETRIES = int(os.getenv("MAX_RETRIES", 3))
    RATE_LIMIT_PAUSE = float(os.getenv("RATE_LIMIT_PAUSE", 1.0))
    REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", 30))

    # Server Settings
    HOST = os.getenv("HOST", "127.0.0.1")
    PORT = int(os.getenv("PORT", 3000))

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_DIR = os.getenv("LOG_DIR", "logs")
    LOG_TO_FILE = os.getenv("LOG_TO_FILE", "false").lower() in ("1", "true", "yes")

    TRACKER_CREDENTIALS = {
        "youtrack": ["YOUTRACK_TOKEN"],
        "azure_devops": ["ADO_PAT"],
    }

    @classmethod
    def validate(cls, tracker=None, require_llm=True):
        """
        Check that the credentials needed for a run are present.

        :param tracker: "youtrack", "azure_devops" or None to accept either
        :param require_llm: Whether the Anthropic key is required
        """
        missing_vars = []
        if tracker:
            missing_vars.extend(
                var for var in cls.TRACKER_CREDENTIALS[tracker] if not getattr(cls, var)
            )
        elif not (cls.YOUTRACK_TOKEN or cls.ADO_PAT):
            missing_vars.append("YOUTRACK_TOKEN or ADO_PAT")
        if require_llm and not cls.ANTHROPIC_API_KEY:
            missing_vars.append("ANTHROPIC_API_KEY")
        if missing_vars:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing_vars)}"
            )

    @classmethod
    def get_log_file(cls, name, timestamp):
        return os.path.join(cls.LOG_DIR, f"{name}_{timestamp}.log")
