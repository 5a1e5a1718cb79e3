"""
Domain Lexicon
Static garden vocabulary used to classify query terms: subject terms grouped by
class, action/instruction terms, stop words and a synonym table
"""
from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping, Optional, Tuple
from rapidfuzz import fuzz, process
import logging

logger = logging.getLogger(__name__)


# Subject terms by class. Class order is the tie-break order for best_match.
GARDEN_TERMS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("vegetables", (
        "tomato", "tomatoes", "cherry tomato", "beefsteak tomato", "heirloom tomato",
        "pepper", "peppers", "bell pepper", "hot pepper", "jalapeño", "chili",
        "cucumber", "cucumbers", "pickle", "pickles",
        "lettuce", "salad", "spinach", "arugula", "kale", "chard", "collards",
        "carrot", "carrots", "radish", "radishes", "turnip", "beet", "beets",
        "onion", "onions", "garlic", "shallot", "leek", "scallion", "chive",
        "bean", "beans", "green bean", "lima bean", "pea", "peas", "snap pea",
        "corn", "sweet corn", "popcorn",
        "squash", "zucchini", "pumpkin", "gourd", "butternut", "acorn squash",
        "broccoli", "cauliflower", "cabbage", "brussels sprouts",
        "potato", "potatoes", "sweet potato", "yam",
        "eggplant", "aubergine",
        "okra", "artichoke", "asparagus", "celery", "fennel",
    )),
    ("herbs", (
        "basil", "oregano", "thyme", "rosemary", "sage", "parsley", "cilantro", "coriander",
        "mint", "spearmint", "peppermint", "dill", "chive", "chives",
        "lavender", "lemon balm", "marjoram", "tarragon", "bay", "bay leaf",
    )),
    ("flowers", (
        "marigold", "marigolds", "sunflower", "sunflowers", "zinnia", "zinnias",
        "cosmos", "petunia", "petunias", "impatiens", "begonia", "begonias",
        "rose", "roses", "tulip", "tulips", "daffodil", "daffodils", "crocus",
        "lily", "lilies", "dahlia", "dahlias", "iris", "peony", "peonies",
        "carnation", "carnations", "chrysanthemum", "mum", "mums",
        "pansy", "pansies", "viola", "violas", "snapdragon", "snapdragons",
        "calendula", "nasturtium", "nasturtiums", "sweet pea", "morning glory",
    )),
    ("perennials", (
        "hosta", "hostas", "daylily", "daylilies", "black-eyed susan",
        "coneflower", "echinacea", "rudbeckia", "sedum", "astilbe",
        "coral bells", "heuchera", "lamb's ear", "catmint", "salvia",
    )),
    ("trees", (
        "apple", "apples", "pear", "pears", "cherry", "cherries", "peach", "peaches",
        "plum", "plums", "fig", "figs", "citrus", "lemon", "lime", "orange",
        "blueberry", "blueberries", "raspberry", "raspberries", "strawberry", "strawberries",
        "grape", "grapes", "grapevine", "blackberry", "blackberries",
    )),
    ("tools", (
        "shovel", "spade", "rake", "hoe", "trowel", "pruners", "shears",
        "watering can", "hose", "sprinkler", "fertilizer", "compost", "mulch",
        "seed", "seeds", "seedling", "seedlings", "transplant", "transplants",
        "pot", "pots", "container", "containers", "planter", "planters",
        "greenhouse", "cold frame", "trellis", "stakes", "cages",
    )),
)

# Instruction words that are common but say little about the subject
ACTION_TERMS: Tuple[str, ...] = (
    "how", "to", "grow", "plant", "growing", "planting", "care", "caring",
    "when", "where", "start", "starting", "guide", "tips", "help",
    "best", "easy", "simple", "beginner", "indoor", "outdoor", "container",
    "from", "seed", "seeds", "water", "watering", "fertilize", "fertilizing",
    "harvest", "harvesting", "prune", "pruning", "disease", "pest", "problem",
    "soil", "sun", "shade", "light", "spacing", "depth", "time", "season",
)

STOP_WORDS: Tuple[str, ...] = (
    "a", "an", "and", "are", "as", "at", "be", "by", "for", "from",
    "has", "he", "in", "is", "it", "its", "of", "on", "that", "the",
    "to", "was", "will", "with", "my", "your", "i", "you", "can", "do",
)

SYNONYMS: Dict[str, Tuple[str, ...]] = {
    "tomato": ("tomatoes", "cherry tomato", "beefsteak tomato", "heirloom tomato"),
    "tomatoes": ("tomato", "cherry tomatoes", "beefsteak tomatoes"),
    "pepper": ("peppers", "bell pepper", "hot pepper", "chili pepper"),
    "herb": ("herbs", "herbal", "aromatic"),
    "flower": ("flowers", "bloom", "blooms", "flowering"),
    "vegetable": ("vegetables", "veggie", "veggies"),
    "plant": ("plants", "planting", "grow", "growing"),
    "seed": ("seeds", "seeding", "sow", "sowing"),
    "garden": ("gardening", "yard", "backyard"),
}


@dataclass(frozen=True)
class DomainLexicon:
    """
    Immutable garden vocabulary.

    Built once and shared read-only between requests. Pass an alternate
    instance to the analyzer to classify against a different vocabulary.
    """

    subject_classes: Tuple[Tuple[str, Tuple[str, ...]], ...]
    action_terms: FrozenSet[str]
    stop_words: FrozenSet[str]
    synonym_table: Mapping[str, Tuple[str, ...]]

    _ordered_terms: Tuple[str, ...] = field(init=False, repr=False, compare=False, hash=False)
    _term_set: FrozenSet[str] = field(init=False, repr=False, compare=False, hash=False)
    _class_by_term: Mapping[str, str] = field(init=False, repr=False, compare=False, hash=False)

    def __post_init__(self):
        ordered: List[str] = []
        class_by_term: Dict[str, str] = {}

        for class_name, terms in self.subject_classes:
            for term in terms:
                term = term.lower()
                if term not in class_by_term:
                    class_by_term[term] = class_name
                    ordered.append(term)

        object.__setattr__(self, "_ordered_terms", tuple(ordered))
        object.__setattr__(self, "_term_set", frozenset(ordered))
        object.__setattr__(self, "_class_by_term", MappingProxyType(class_by_term))

    def all_terms(self) -> FrozenSet[str]:
        return self._term_set

    def ordered_terms(self) -> Tuple[str, ...]:
        """All subject terms in class order, first occurrence wins"""
        return self._ordered_terms

    def phrases(self) -> Tuple[str, ...]:
        """Multi-word subject terms in class order"""
        return tuple(term for term in self._ordered_terms if " " in term)

    def class_of(self, term: str) -> Optional[str]:
        return self._class_by_term.get(term.lower())

    def is_known_subject(self, token: str) -> bool:
        """True if the token contains a lexicon term or is contained in one"""
        token = token.lower()
        if not token:
            return False

        return any(
            term in token or token in term
            for term in self._ordered_terms
        )

    def best_match(self, token: str) -> Optional[str]:
        """
        Resolve a token to its canonical lexicon term

        Exact match wins. Otherwise the first term in class order where either
        string contains the other.

        Args:
            token: Query token

        Returns:
            Canonical term, or None if nothing matches
        """
        token = token.lower()
        if not token:
            return None

        if token in self._term_set:
            return token

        for term in self._ordered_terms:
            if term in token or token in term:
                return term

        return None

    def synonyms(self, term: str) -> List[str]:
        """
        Expand a term into itself, its plural/singular toggle and declared aliases

        Args:
            term: Term to expand

        Returns:
            Ordered list of related terms, always starting with the term
        """
        term = term.lower()
        expanded = [term]

        if term.endswith("s") and len(term) > 3:
            expanded.append(term[:-1])
        else:
            expanded.append(term + "s")

        expanded.extend(self.synonym_table.get(term, ()))

        # Preserve order, drop duplicates
        return list(dict.fromkeys(expanded))

    def is_action_term(self, token: str) -> bool:
        return token.lower() in self.action_terms

    def is_stop_word(self, token: str) -> bool:
        return token.lower() in self.stop_words

    def closest_terms(
        self,
        token: str,
        limit: int = 3,
        threshold: int = 80
    ) -> List[Tuple[str, float]]:
        """
        Typo-tolerant lookup of lexicon terms similar to a token

        Only used for suggestions; classification never uses fuzzy matching.

        Args:
            token: Token to look up
            limit: Maximum number of terms returned
            threshold: Minimum similarity score (0-100)

        Returns:
            List of (term, confidence) tuples, best first
        """
        matches = process.extract(
            token.lower(),
            self._ordered_terms,
            scorer=fuzz.ratio,
            limit=limit,
            score_cutoff=threshold
        )

        return [(term, score / 100.0) for term, score, _ in matches]


def build_lexicon(
    subject_classes: Tuple[Tuple[str, Tuple[str, ...]], ...] = GARDEN_TERMS,
    action_terms: Tuple[str, ...] = ACTION_TERMS,
    stop_words: Tuple[str, ...] = STOP_WORDS,
    synonyms: Optional[Dict[str, Tuple[str, ...]]] = None
) -> DomainLexicon:
    """Build a lexicon, defaulting to the garden vocabulary"""
    table = SYNONYMS if synonyms is None else synonyms

    return DomainLexicon(
        subject_classes=tuple(
            (class_name, tuple(terms)) for class_name, terms in subject_classes
        ),
        action_terms=frozenset(t.lower() for t in action_terms),
        stop_words=frozenset(w.lower() for w in stop_words),
        synonym_table=MappingProxyType({
            key.lower(): tuple(value) for key, value in table.items()
        }),
    )


@lru_cache()
def get_lexicon() -> DomainLexicon:
    """
    Get the default garden lexicon (cached, built once per process)

    Returns:
        DomainLexicon instance
    """
    lexicon = build_lexicon()
    logger.info(
        f"Garden lexicon loaded: {len(lexicon.all_terms())} subject terms, "
        f"{len(lexicon.action_terms)} action terms"
    )
    return lexicon
