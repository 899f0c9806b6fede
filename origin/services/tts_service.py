import base64
import logging

import requests

from origin.config import config
from origin.errors import SpeechUnavailable

logger = logging.getLogger(__name__)


class TTSService:
    def __init__(self, session=None):
        self.session = session or requests.Session()

    def synthesize(self, text):
        """Return MP3 bytes for ``text`` from the ElevenLabs API."""
        if not config.ELEVENLABS_API_KEY:
            raise SpeechUnavailable("Speech API key is not configured")

        url = f"{config.TTS_BASE_URL.rstrip('/')}/text-to-speech/{config.TTS_VOICE_ID}"
        try:
            resp = self.session.post(
                url,
                headers={
                    "Accept": "audio/mpeg",
                    "Content-Type": "application/json",
                    "xi-api-key": config.ELEVENLABS_API_KEY,
                },
                json={
                    "text": text,
                    "model_id": config.TTS_MODEL_ID,
                    "voice_settings": config.TTS_VOICE_SETTINGS,
                },
                timeout=config.TTS_TIMEOUT_S,
            )
        except requests.RequestException as e:
            logger.error("TTS request failed: %s", e)
            raise SpeechUnavailable(details=str(e)) from e

        if not resp.ok:
            logger.error("ElevenLabs error status: %s body: %s", resp.status_code, resp.text)
            raise SpeechUnavailable("ElevenLabs API error", details=resp.text)
        return resp.content

    def synthesize_b64(self, text):
        audio = self.synthesize(text)
        logger.info("TTS success, audio bytes: %d", len(audio))
        return base64.b64encode(audio).decode("ascii")

tts_service = TTSService()
