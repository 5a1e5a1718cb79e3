"""
Query Analyzer
Classifies free-text queries into subject terms (plants, tools), action terms
(growing instructions) and residual terms
"""
import re
import string
from typing import List, Optional

from garden_search.models.query import ParsedQuery, QueryType
from garden_search.services.lexicon import DomainLexicon
import logging

logger = logging.getLogger(__name__)


MIN_QUERY_LENGTH = 2
MAX_SUGGESTIONS = 5

SUGGESTION_TEMPLATES = (
    "How to grow {subject}",
    "{subject} care guide",
    "When to plant {subject}",
    "{subject} problems",
    "Harvesting {subject}",
)

_WHITESPACE = re.compile(r"\s+")
_EDGE_PUNCTUATION = string.punctuation + "¡¿“”‘’"


def is_searchable(query: Optional[str]) -> bool:
    """Queries shorter than two characters after trimming are not searched"""
    return bool(query) and len(query.strip()) >= MIN_QUERY_LENGTH


def tokenize(query: str, lexicon: DomainLexicon) -> List[str]:
    """
    Split a query into classifiable tokens

    Args:
        query: Raw query text
        lexicon: Lexicon providing the stop-word set

    Returns:
        Lowercase tokens without edge punctuation, single characters,
        stop words or tokens that contain no letters
    """
    tokens = []

    for raw in _WHITESPACE.split(query.lower().strip()):
        token = raw.strip(_EDGE_PUNCTUATION)

        if len(token) <= 1:
            continue
        if lexicon.is_stop_word(token):
            continue
        if not any(ch.isalpha() for ch in token):
            continue

        tokens.append(token)

    return tokens


def analyze_query(query: str, lexicon: DomainLexicon) -> ParsedQuery:
    """
    Parse a search query into subject, action and residual terms

    Args:
        query: Raw query text
        lexicon: Vocabulary to classify against

    Returns:
        ParsedQuery with ordered term buckets, primary subject and query type
    """
    clean_query = query.lower().strip()

    subject_terms: List[str] = []
    action_terms: List[str] = []
    other_terms: List[str] = []

    # 1. Classify each token
    for token in tokenize(query, lexicon):
        if lexicon.is_known_subject(token):
            match = lexicon.best_match(token)
            if match and match not in subject_terms:
                subject_terms.append(match)
        elif lexicon.is_action_term(token):
            if token not in action_terms:
                action_terms.append(token)
        else:
            other_terms.append(token)

    # 2. Multi-word subjects replace their constituent words
    for phrase in lexicon.phrases():
        if phrase not in clean_query:
            continue

        if phrase not in subject_terms:
            subject_terms.append(phrase)

        for word in phrase.split(" "):
            if word in subject_terms:
                subject_terms.remove(word)

    # 3. Primary subject and query type
    primary_subject = subject_terms[0] if subject_terms else None

    if subject_terms and len(subject_terms) >= len(action_terms):
        query_type = QueryType.SUBJECT_FOCUSED
    elif len(action_terms) > len(subject_terms):
        query_type = QueryType.ACTION_FOCUSED
    else:
        query_type = QueryType.GENERAL

    parsed = ParsedQuery(
        subject_terms=tuple(subject_terms),
        action_terms=tuple(action_terms),
        other_terms=tuple(other_terms),
        original_query=query,
        primary_subject=primary_subject,
        query_type=query_type
    )

    logger.debug(
        f"Parsed query '{query}': subjects={list(parsed.subject_terms)}, "
        f"actions={list(parsed.action_terms)}, other={list(parsed.other_terms)}, "
        f"type={parsed.query_type.value}"
    )

    return parsed


def generate_search_suggestions(
    parsed: ParsedQuery,
    lexicon: DomainLexicon,
    fuzzy_threshold: int = 80
) -> List[str]:
    """
    Build follow-up search suggestions for a parsed query

    Uses the primary subject; when the query has none, the closest lexicon
    term to a residual token stands in (catches typos such as "basl").

    Args:
        parsed: Parsed query
        lexicon: Vocabulary used for the typo lookup
        fuzzy_threshold: Minimum similarity (0-100) for the typo lookup

    Returns:
        Up to five suggestion strings
    """
    subject = parsed.primary_subject

    if subject is None:
        for token in parsed.other_terms:
            matches = lexicon.closest_terms(token, limit=1, threshold=fuzzy_threshold)
            if matches:
                subject = matches[0][0]
                logger.debug(f"Suggestion subject '{subject}' inferred from '{token}'")
                break

    if subject is None:
        return []

    suggestions = [
        template.format(subject=subject)
        for template in SUGGESTION_TEMPLATES
    ]

    return suggestions[:MAX_SUGGESTIONS]
