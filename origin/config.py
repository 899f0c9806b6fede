import os
import re
import configparser

class Config:
    def __init__(self, root_path):
        self.root_path = root_path
        self._cfg = configparser.ConfigParser()
        self._cfg.read(os.path.join(root_path, "config.ini"), encoding="utf-8")

        # Flask Config
        self.MAX_CONTENT_LENGTH = 10 * 1024 * 1024  # 10MB max, base64 photos
        self.JSON_AS_ASCII = False
        self.LOG_DIR = os.environ.get("LOG_DIR") or self._cfg.get("app", "log_dir", fallback="logs")

        # Vision / Chat model Config (OpenAI-compatible endpoint)
        self.AI_API_KEY = os.environ.get("AI_API_KEY") or os.environ.get("OPENAI_API_KEY") or self._cfg.get("ai", "api_key", fallback="")
        self.AI_BASE_URL = os.environ.get("AI_BASE_URL") or self._cfg.get("ai", "base_url", fallback="https://api.openai.com/v1")
        self.VISION_MODEL_ID = self._normalize_model_id(os.environ.get("VISION_MODEL") or self._cfg.get("ai", "vision_model", fallback="gpt-4o-mini"))
        self.CHAT_MODEL_ID = self._normalize_model_id(os.environ.get("CHAT_MODEL") or self._cfg.get("ai", "chat_model", fallback=None) or self.VISION_MODEL_ID)
        self.AI_TIMEOUT_S = float(os.environ.get("AI_TIMEOUT_S") or self._cfg.get("ai", "timeout_s", fallback="60"))
        self.AI_MAX_WORKERS = int(os.environ.get("AI_MAX_WORKERS") or self._cfg.get("ai", "max_workers", fallback="3"))

        # TTS Config (ElevenLabs)
        self.ELEVENLABS_API_KEY = os.environ.get("ELEVENLABS_API_KEY") or self._cfg.get("tts", "api_key", fallback="")
        self.TTS_BASE_URL = os.environ.get("TTS_BASE_URL") or self._cfg.get("tts", "base_url", fallback="https://api.elevenlabs.io/v1")
        self.TTS_VOICE_ID = os.environ.get("TTS_VOICE_ID") or self._cfg.get("tts", "voice_id", fallback="DowyQ68vDpgFYdWVGjc3")
        self.TTS_MODEL_ID = os.environ.get("TTS_MODEL_ID") or self._cfg.get("tts", "model_id", fallback="eleven_multilingual_v2")
        self.TTS_TIMEOUT_S = float(os.environ.get("TTS_TIMEOUT_S") or self._cfg.get("tts", "timeout_s", fallback="30"))
        self.TTS_VOICE_SETTINGS = {
            "stability": 0.5,
            "similarity_boost": 0.75,
            "style": 0,
            "use_speaker_boost": True,
        }

        # Data Store
        self.DATABASE_PATH = os.environ.get("DATABASE_PATH") or self._cfg.get("storage", "database_path", fallback=os.path.join(root_path, "vocabulary.db"))

        # Vocabulary
        self.DEFAULT_USER_ID = os.environ.get("DEFAULT_USER_ID") or self._cfg.get("app", "default_user_id", fallback="default")
        self.CHAT_CONTEXT_LIMIT = int(os.environ.get("CHAT_CONTEXT_LIMIT") or self._cfg.get("app", "chat_context_limit", fallback="20"))
        # Curated entries replace the vision model's wording only when enabled
        self.USE_CULTURAL_CATALOG = (os.environ.get("USE_CULTURAL_CATALOG") or self._cfg.get("app", "use_cultural_catalog", fallback="false")).strip().lower() in ("1", "true", "yes", "on")

    def _normalize_model_id(self, mid):
        return re.sub(r"\s+", "", str(mid or ""))

config = Config(os.getcwd())
