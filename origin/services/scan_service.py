import logging
from datetime import datetime, timezone

from origin.config import config
from origin.errors import ItemNotRecognized, NoImageProvided, RecognizerResponseInvalid
from origin.services.ai_service import ai_service
from origin.services.catalog import CulturalCatalog, cultural_catalog
from origin.services.vocabulary_service import vocabulary_store
from origin.utils.helpers import decode_image_payload, normalize_lexical_key

logger = logging.getLogger(__name__)


def utc_now():
    return datetime.now(timezone.utc)


def resolve_user_id(user_id):
    user_id = str(user_id or "").strip()
    return user_id or config.DEFAULT_USER_ID


class ScanService:
    """Turns a photo into a recorded vocabulary observation."""

    def __init__(self, recognizer=None, store=None, catalog=None, clock=None):
        self.recognizer = recognizer or ai_service
        self.store = store or vocabulary_store
        if catalog is None:
            catalog = cultural_catalog if config.USE_CULTURAL_CATALOG else CulturalCatalog({})
        self.catalog = catalog
        self.clock = clock or utc_now

    def scan(self, image, user_id=None):
        user_id = resolve_user_id(user_id)
        image_bytes = image if isinstance(image, bytes) else decode_image_payload(image)
        if not image_bytes:
            raise NoImageProvided()

        recognition = self.recognizer.recognize(image_bytes)
        if recognition is None:
            logger.info("Nothing recognized for user %s", user_id)
            raise ItemNotRecognized()
        recognition = self.catalog.resolve(recognition)

        lexical_key = normalize_lexical_key(recognition.english)
        if not lexical_key:
            raise RecognizerResponseInvalid(details="empty english name")

        record, is_review = self.store.upsert_observation(
            user_id, lexical_key, recognition.attrs(), now=self.clock()
        )
        logger.info("Recorded %r for user %s (seen %d times)", lexical_key, user_id, record.times_seen)
        return {
            "english": recognition.english,
            "translation": recognition.translation,
            "pronunciation": recognition.pronunciation,
            "culturalContext": recognition.cultural_context,
            "timesSeen": record.times_seen,
            "isReview": is_review,
            "nextReviewAt": record.to_dict()["nextReviewAt"],
        }

    def vocabulary(self, user_id):
        return self.store.list_by_user(resolve_user_id(user_id))

    def due_for_review(self, user_id, now=None):
        return self.store.list_due(resolve_user_id(user_id), now or self.clock())

scan_service = ScanService()
