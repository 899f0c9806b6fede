import base64
import logging
import concurrent.futures

import openai
from openai import OpenAI

from origin.config import config
from origin.errors import ChatUnavailable, RecognizerResponseInvalid, RecognizerUnavailable
from origin.models import Recognition
from origin.utils.helpers import extract_json_object, guess_image_mime

logger = logging.getLogger(__name__)

VISION_PROMPT = """
You are a knowledgeable cultural expert. Examine this image and identify the most prominent or interesting object, food, symbol, or item visible.

- Always give the Chinese translation (simplified characters) and pinyin pronunciation, whatever the object's origin.
- If the object has cultural significance, include that context.
- Keep culturalContext to 150-180 characters.

Respond with ONLY valid JSON:
{"english": "Mooncake", "translation": "月饼", "pronunciation": "yuèbǐng", "culturalContext": "Shared during Mid-Autumn Festival. The round shape symbolizes family reunion."}

If NO clear object is visible, respond with: {"error": "none"}
"""

CHAT_SYSTEM_PROMPT = """
You are a friendly cultural learning assistant in a mobile app that helps users learn Chinese language and culture by scanning real-world objects.
Be warm and patient, use simple explanations, occasionally include Chinese words with pinyin and meaning, and keep replies to 2-4 sentences.

{vocabulary_context}
"""

REQUIRED_FIELDS = ("english", "translation", "pronunciation")


def parse_recognition(text):
    """Turn the vision model's reply into a ``Recognition``.

    Returns ``None`` when the model reports that nothing was recognized.
    Raises ``RecognizerResponseInvalid`` for anything that is not the expected
    JSON shape.
    """
    try:
        data = extract_json_object(text)
    except ValueError as e:
        logger.error("Failed to parse vision response: %s; raw payload: %r", e, text)
        raise RecognizerResponseInvalid(details=str(e)) from e

    if data.get("error") == "none" or data.get("matched") is False:
        return None

    fields = {}
    for key in REQUIRED_FIELDS:
        value = data.get(key)
        if not isinstance(value, str) or not value.strip():
            logger.error("Vision response missing %r; raw payload: %r", key, text)
            raise RecognizerResponseInvalid(details=f"missing field: {key}")
        fields[key] = value.strip()

    context = data.get("culturalContext")
    if context is None:
        context = ""
    if not isinstance(context, str):
        logger.error("Vision response has non-text culturalContext; raw payload: %r", text)
        raise RecognizerResponseInvalid(details="invalid field: culturalContext")
    return Recognition(cultural_context=context.strip(), **fields)


def _vocabulary_context(words):
    if not words:
        return "The user has not scanned any objects yet."
    listed = ", ".join(f"{w.lexical_key} ({w.translation}, {w.pronunciation})" for w in words)
    return f"The user has learned these Chinese words recently: {listed}."


class AIService:
    def __init__(self, client=None):
        self._client = client
        self.executor = concurrent.futures.ThreadPoolExecutor(max_workers=config.AI_MAX_WORKERS)

    def _get_client(self):
        if self._client is None and config.AI_API_KEY:
            self._client = OpenAI(
                base_url=config.AI_BASE_URL,
                api_key=config.AI_API_KEY,
                timeout=config.AI_TIMEOUT_S,
            )
        return self._client

    def _chat_completion_with_timeout(self, client, model, messages, timeout_s=None, **kwargs):
        fut = self.executor.submit(client.chat.completions.create, model=model, messages=messages, **kwargs)
        try:
            return fut.result(timeout=timeout_s or config.AI_TIMEOUT_S)
        except concurrent.futures.TimeoutError:
            fut.cancel()
            raise

    def recognize(self, image_bytes):
        client = self._get_client()
        if client is None:
            raise RecognizerUnavailable("AI API key is not configured")

        encoded = base64.b64encode(image_bytes).decode("ascii")
        data_url = f"data:{guess_image_mime(image_bytes)};base64,{encoded}"
        messages_variants = [
            [{
                'role': 'user',
                'content': [
                    {'type': 'text', 'text': VISION_PROMPT},
                    {'type': 'image_url', 'image_url': {'url': data_url}},
                ],
            }],
            [{
                'role': 'user',
                'content': [
                    {'type': 'text', 'text': VISION_PROMPT},
                    {'type': 'image_url', 'image_url': data_url},
                ],
            }],
        ]

        last_err = None
        for msgs in messages_variants:
            try:
                response = self._chat_completion_with_timeout(
                    client,
                    model=config.VISION_MODEL_ID,
                    messages=msgs,
                    temperature=0.6,
                    top_p=0.8,
                )
            except openai.BadRequestError as e:
                logger.warning("Vision request rejected, trying next message shape: %s", e)
                last_err = e
                continue
            except concurrent.futures.TimeoutError as e:
                logger.error("Vision model timed out after %ss", config.AI_TIMEOUT_S)
                raise RecognizerUnavailable("Vision model timed out") from e
            except openai.OpenAIError as e:
                logger.error("Vision API error: %s", e)
                raise RecognizerUnavailable(details=str(e)) from e

            try:
                content = response.choices[0].message.content or ""
            except (AttributeError, IndexError, TypeError) as e:
                logger.error("Vision response has no message content: %r", response)
                raise RecognizerResponseInvalid(details="empty completion") from e
            logger.info("Raw vision response: %s", content)
            return parse_recognition(content)

        raise RecognizerUnavailable(details=str(last_err))

    def chat(self, message, history=None, words=None):
        client = self._get_client()
        if client is None:
            raise ChatUnavailable("AI API key is not configured")

        messages = [{
            'role': 'system',
            'content': CHAT_SYSTEM_PROMPT.format(vocabulary_context=_vocabulary_context(words)).strip(),
        }]
        for msg in history or []:
            if not isinstance(msg, dict):
                continue
            text = str(msg.get("text") or "").strip()
            if not text:
                continue
            messages.append({'role': 'user' if msg.get("isUser") else 'assistant', 'content': text})
        messages.append({'role': 'user', 'content': message})

        try:
            response = self._chat_completion_with_timeout(
                client,
                model=config.CHAT_MODEL_ID,
                messages=messages,
                max_tokens=500,
            )
            return (response.choices[0].message.content or "").strip()
        except concurrent.futures.TimeoutError as e:
            logger.error("Chat model timed out after %ss", config.AI_TIMEOUT_S)
            raise ChatUnavailable("Chat model timed out") from e
        except (openai.OpenAIError, AttributeError, IndexError) as e:
            logger.error("Chat error: %s", e)
            raise ChatUnavailable(details=str(e)) from e

ai_service = AIService()
