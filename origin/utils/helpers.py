import base64
import binascii
import json
import re

_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")


def normalize_lexical_key(word):
    if not isinstance(word, str):
        return ""
    return re.sub(r"\s+", " ", word).strip().lower()


def extract_json_object(text):
    """Pull the JSON object out of a model reply.

    Replies may be wrapped in markdown code fences or surrounded by chatter;
    everything outside the outermost braces is dropped. Raises ``ValueError``
    when no JSON object can be recovered.
    """
    content = (text or "").strip()
    content = _FENCE_RE.sub("", content).strip()
    if "{" in content and "}" in content:
        content = content[content.find("{"):content.rfind("}") + 1]
    data = json.loads(content)
    if not isinstance(data, dict):
        raise ValueError("model response is not a JSON object")
    return data


def decode_image_payload(payload):
    """Decode a base64 image, optionally given as a ``data:image/...`` URL.

    Returns ``b""`` when there is nothing usable to decode.
    """
    if not isinstance(payload, str):
        return b""
    payload = payload.strip()
    if payload.startswith("data:"):
        try:
            _header, payload = payload.split(",", 1)
        except ValueError:
            return b""
    payload = re.sub(r"\s+", "", payload)
    if not payload:
        return b""
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        return b""


def guess_image_mime(data):
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if data[:6] in (b"GIF87a", b"GIF89a"):
        return "image/gif"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
