from origin.models import Recognition
from origin.utils.helpers import normalize_lexical_key

# Curated entries; these win over the vision model's own wording.
CULTURAL_ITEMS = {
    "zongzi": {
        "english": "Zongzi",
        "translation": "粽子",
        "pronunciation": "zòngzi",
        "cultural_context": "Sticky rice wrapped in bamboo leaves, eaten during Dragon Boat Festival to honor Qu Yuan, a poet who drowned himself in protest. Families wrap them together, each region with its own filling style.",
        "aliases": ["rice dumpling", "粽子"],
    },
    "star anise": {
        "english": "Star Anise",
        "translation": "八角",
        "pronunciation": "bājiǎo",
        "cultural_context": "The \"eight corners\" spice is essential in Chinese five-spice powder and braised dishes. Its star shape represents luck and completeness. This is the smell of red-braised pork belly and of home.",
        "aliases": ["anise", "八角"],
    },
    "mooncake": {
        "english": "Mooncake",
        "translation": "月饼",
        "pronunciation": "yuèbǐng",
        "cultural_context": "Shared during Mid-Autumn Festival when families gather to admire the full moon. The round shape symbolizes completeness and reunion, each bite a wish for family togetherness.",
        "aliases": ["moon cake", "月饼"],
    },
}


class CulturalCatalog:
    """Lookup table of curated items keyed by lexical key and aliases."""

    def __init__(self, items=None):
        self._entries = {}
        for key, item in (CULTURAL_ITEMS if items is None else items).items():
            for name in [key, item.get("english", "")] + list(item.get("aliases", [])):
                name = normalize_lexical_key(name)
                if name:
                    self._entries[name] = item

    def __len__(self):
        return len({id(item) for item in self._entries.values()})

    def lookup(self, name):
        return self._entries.get(normalize_lexical_key(name))

    def resolve(self, recognition: Recognition) -> Recognition:
        item = self.lookup(recognition.english)
        if item is None:
            return recognition
        return Recognition(
            english=item["english"],
            translation=item["translation"],
            pronunciation=item["pronunciation"],
            cultural_context=item.get("cultural_context", ""),
        )

cultural_catalog = CulturalCatalog()
