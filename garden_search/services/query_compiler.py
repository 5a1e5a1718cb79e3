"""
Query Compiler
Turns a parsed query into a tiered, weighted Elasticsearch bool query so exact
subject matches dominate, synonym matches follow, instruction words contribute
moderately and the raw query string remains as a low-weight catch-all
"""
from typing import Any, Dict, List, Optional

from garden_search.models.content import ContentType
from garden_search.models.query import CompiledQuery, ParsedQuery, QueryType
from garden_search.services.lexicon import DomainLexicon
import logging

logger = logging.getLogger(__name__)


# Index fields
TITLE_FIELD = "title"
BODY_FIELD = "content"
SUMMARY_FIELD = "metaDescription"
TYPE_FIELD = "type"
PUBLISHED_FIELD = "publishedAt"

# Tier boosts. Changing these changes ranking; re-check the ranking tests.
SUBJECT_TITLE_PHRASE_BOOST = 15
SUBJECT_TITLE_SYNONYM_BOOST = 10
SUBJECT_SUMMARY_SYNONYM_BOOST = 8
SUBJECT_BODY_SYNONYM_BOOST = 6
SUBJECT_BODY_PHRASE_BOOST = 8

ACTION_FIELD_BOOSTS = {TITLE_FIELD: 4, BODY_FIELD: 2, SUMMARY_FIELD: 3}
OTHER_FIELD_BOOSTS = {TITLE_FIELD: 2, BODY_FIELD: 1, SUMMARY_FIELD: 1.5}
FULL_QUERY_FIELD_BOOSTS = {TITLE_FIELD: 3, BODY_FIELD: 1, SUMMARY_FIELD: 2}

HIGHLIGHT_PRE_TAG = "<mark>"
HIGHLIGHT_POST_TAG = "</mark>"

HIGHLIGHT_FIELDS = {
    TITLE_FIELD: {"fragment_size": 150, "number_of_fragments": 1},
    BODY_FIELD: {"fragment_size": 150, "number_of_fragments": 2},
    SUMMARY_FIELD: {"fragment_size": 100, "number_of_fragments": 1},
}


def _boosted_fields(boosts: Dict[str, float]) -> List[str]:
    return [f"{name}^{boost:g}" for name, boost in boosts.items()]


def _match(field: str, text: str, boost: float) -> Dict[str, Any]:
    return {"match": {field: {"query": text, "operator": "or", "boost": boost}}}


def _match_phrase(field: str, text: str, boost: float) -> Dict[str, Any]:
    return {"match_phrase": {field: {"query": text, "boost": boost}}}


def _multi_match(text: str, boosts: Dict[str, float]) -> Dict[str, Any]:
    return {
        "multi_match": {
            "query": text,
            "fields": _boosted_fields(boosts),
            "type": "best_fields",
            "fuzziness": "AUTO"
        }
    }


def build_subject_clauses(
    subject_terms: List[str],
    lexicon: DomainLexicon
) -> List[Dict[str, Any]]:
    """
    Build tiers A-C for the subject terms

    Args:
        subject_terms: Canonical subject terms
        lexicon: Vocabulary providing synonym expansion

    Returns:
        List of should clauses
    """
    clauses = []

    # Tier A: exact subject phrase in title
    for subject in subject_terms:
        clauses.append(_match_phrase(TITLE_FIELD, subject, SUBJECT_TITLE_PHRASE_BOOST))

    # Tier B: any synonym in title
    for subject in subject_terms:
        expanded = " ".join(lexicon.synonyms(subject))
        clauses.append(_match(TITLE_FIELD, expanded, SUBJECT_TITLE_SYNONYM_BOOST))

    # Tier C: synonyms in summary/body, exact phrase in body
    for subject in subject_terms:
        expanded = " ".join(lexicon.synonyms(subject))
        clauses.append(_match(SUMMARY_FIELD, expanded, SUBJECT_SUMMARY_SYNONYM_BOOST))
        clauses.append(_match(BODY_FIELD, expanded, SUBJECT_BODY_SYNONYM_BOOST))
        clauses.append(_match_phrase(BODY_FIELD, subject, SUBJECT_BODY_PHRASE_BOOST))

    return clauses


def build_highlight() -> Dict[str, Any]:
    """Highlight spec for title, body and summary"""
    return {
        "pre_tags": [HIGHLIGHT_PRE_TAG],
        "post_tags": [HIGHLIGHT_POST_TAG],
        "fields": {name: dict(spec) for name, spec in HIGHLIGHT_FIELDS.items()}
    }


def build_sort() -> List[Any]:
    """Relevance first, newest first on ties"""
    return ["_score", {PUBLISHED_FIELD: {"order": "desc"}}]


def compile_query(
    parsed: ParsedQuery,
    lexicon: DomainLexicon,
    content_type: Optional[ContentType] = None
) -> CompiledQuery:
    """
    Compile a parsed query into a weighted search request

    Args:
        parsed: Output of the query analyzer
        lexicon: Vocabulary providing synonym expansion
        content_type: Restrict results to one content type (non-scoring)

    Returns:
        CompiledQuery with bool query, highlight spec and sort order
    """
    should = build_subject_clauses(list(parsed.subject_terms), lexicon)

    # Tier D: instruction words, typo tolerant
    if parsed.action_terms:
        should.append(_multi_match(" ".join(parsed.action_terms), ACTION_FIELD_BOOSTS))

    # Tier E: residual words
    if parsed.other_terms:
        should.append(_multi_match(" ".join(parsed.other_terms), OTHER_FIELD_BOOSTS))

    # Tier F: whole query, always present
    should.append(_multi_match(parsed.original_query.strip(), FULL_QUERY_FIELD_BOOSTS))

    if parsed.query_type == QueryType.SUBJECT_FOCUSED and parsed.has_subjects:
        minimum_should_match = 2
    else:
        minimum_should_match = 1

    bool_query: Dict[str, Any] = {
        "should": should,
        "minimum_should_match": minimum_should_match,
    }

    if content_type is not None:
        bool_query["filter"] = [{"term": {TYPE_FIELD: content_type.value}}]

    compiled = CompiledQuery(
        query={"bool": bool_query},
        highlight=build_highlight(),
        sort=build_sort(),
        content_type=content_type,
        minimum_should_match=minimum_should_match
    )

    logger.debug(
        f"Compiled '{parsed.original_query}' into {len(should)} clauses "
        f"(minimum_should_match={minimum_should_match}, "
        f"type={content_type.value if content_type else 'all'})"
    )

    return compiled
