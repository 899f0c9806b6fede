"""Error kinds surfaced to API callers.

Each error carries a machine-readable ``kind``, the HTTP status it maps to and
a human-readable message. Nothing in the service retries on these; the caller
decides whether to resubmit.
"""


class OriginError(Exception):
    kind = "internal_error"
    status = 500
    default_message = "Internal server error"

    def __init__(self, message=None, details=None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self):
        body = {"error": self.kind, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class NoImageProvided(OriginError):
    kind = "no_image_provided"
    status = 400
    default_message = "No image provided"


class ItemNotRecognized(OriginError):
    kind = "item_not_recognized"
    status = 404
    default_message = "Point your camera at an object to learn about it!"


class RecognizerResponseInvalid(OriginError):
    kind = "recognizer_response_invalid"
    default_message = "Failed to parse AI response"


class RecognizerUnavailable(OriginError):
    kind = "recognizer_unavailable"
    default_message = "Vision model is unavailable, try again"


class StorageUnavailable(OriginError):
    kind = "storage_unavailable"
    default_message = "Vocabulary storage is unavailable, try again"


class NoMessageProvided(OriginError):
    kind = "no_message_provided"
    status = 400
    default_message = "No message provided"


class NoTextProvided(OriginError):
    kind = "no_text_provided"
    status = 400
    default_message = "No text provided"


class ChatUnavailable(OriginError):
    kind = "chat_unavailable"
    default_message = "Failed to process chat"


class SpeechUnavailable(OriginError):
    kind = "speech_unavailable"
    default_message = "Failed to generate speech"
