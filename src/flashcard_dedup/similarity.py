"""Similarity metrics between card texts and between whole cards.

All scores are floats in [0, 1] and symmetric in their two arguments.

- word_jaccard: overlap of whitespace word sets (words longer than 2 chars)
- levenshtein_similarity: 1 - edit distance / longer length
- card_similarity: lexical near-duplicate score (Jaccard blend vs Levenshtein)
- concept_similarity: overlap of subject terms after stop-word removal
"""

from __future__ import annotations

import re
from typing import FrozenSet, Set

from rapidfuzz.distance import Levenshtein

from .normalize import normalize_text
from .records import FlashcardRecord

# Longer fields are compared on their first MAX_EDIT_LENGTH characters only.
MAX_EDIT_LENGTH = 500

QUESTION_WEIGHT = 0.7
ANSWER_WEIGHT = 0.3
CONCEPT_QUESTION_BONUS = 0.3

_TOKEN_RE = re.compile(r"[^\W_]+(?:['’][^\W_]+)*")

CONCEPT_STOP_WORDS: FrozenSet[str] = frozenset(
    {
        # articles, conjunctions, determiners
        "the", "and", "but", "nor", "for", "yet", "that", "this", "these", "those",
        "than", "then", "also", "such", "each", "every", "any", "all", "some",
        "both", "either", "neither", "not", "only", "very", "more", "most",
        "other", "another",
        # auxiliary and linking verbs
        "are", "was", "were", "been", "being", "has", "have", "had", "having",
        "does", "did", "doing", "done", "can", "could", "will", "would",
        "shall", "should", "may", "might", "must", "get", "gets", "got",
        # pronouns
        "you", "your", "yours", "his", "her", "hers", "its", "our", "ours",
        "their", "theirs", "they", "them", "she", "him", "who", "whom", "whose",
        "what", "which", "when", "where", "why", "how", "there", "here",
        # prepositions
        "about", "above", "after", "against", "along", "among", "around",
        "before", "behind", "below", "between", "beyond", "during", "from",
        "into", "onto", "over", "through", "toward", "towards", "under",
        "upon", "with", "within", "without", "via", "per",
        # generic instructional words
        "define", "definition", "explain", "describe", "example", "examples",
        "difference", "differences", "list", "name", "give", "identify",
        "mean", "means", "meaning", "called", "term", "terms", "used", "use",
        "uses", "using", "following",
    }
)


def _word_set(text: object) -> Set[str]:
    return {w for w in normalize_text(text).split(" ") if len(w) > 2}


def word_jaccard(a: object, b: object) -> float:
    """Jaccard similarity of the word sets of two texts.

    Both empty -> 1.0, exactly one empty -> 0.0.
    """
    words_a = _word_set(a)
    words_b = _word_set(b)
    if not words_a and not words_b:
        return 1.0
    if not words_a or not words_b:
        return 0.0
    return len(words_a & words_b) / len(words_a | words_b)


def levenshtein_similarity(a: object, b: object) -> float:
    """Edit-distance similarity, computed on at most the first 500 characters."""
    s1 = normalize_text(a)
    s2 = normalize_text(b)
    if s1 == s2:
        return 1.0
    if not s1 or not s2:
        return 0.0
    s1 = s1[:MAX_EDIT_LENGTH]
    s2 = s2[:MAX_EDIT_LENGTH]
    distance = Levenshtein.distance(s1, s2)
    return 1.0 - distance / max(len(s1), len(s2))


def card_similarity(card1: FlashcardRecord, card2: FlashcardRecord) -> float:
    """Lexical near-duplicate score between two cards.

    Questions weigh 70% and answers 30% in the Jaccard blend; the question
    edit-distance similarity wins when higher, so punctuation-only rewordings of
    short questions still score close to 1.
    """
    question_jaccard = word_jaccard(card1.question, card2.question)
    answer_jaccard = word_jaccard(card1.answer, card2.answer)
    jaccard_score = question_jaccard * QUESTION_WEIGHT + answer_jaccard * ANSWER_WEIGHT
    question_edit = levenshtein_similarity(card1.question, card2.question)
    return max(jaccard_score, question_edit)


def concept_terms(text: object) -> Set[str]:
    """Subject terms of a text: word tokens of 3+ chars that are not stop words."""
    return {
        tok
        for tok in _TOKEN_RE.findall(normalize_text(text))
        if len(tok) >= 3 and tok not in CONCEPT_STOP_WORDS
    }


def concept_similarity(card1: FlashcardRecord, card2: FlashcardRecord) -> float:
    """Semantic score: shared subject terms across question and answer.

    Jaccard over the combined term sets, plus a bonus of up to 0.3 for question
    terms in common (relative to the smaller question), capped at 1.0.
    """
    terms1 = concept_terms(f"{normalize_text(card1.question)} {normalize_text(card1.answer)}")
    terms2 = concept_terms(f"{normalize_text(card2.question)} {normalize_text(card2.answer)}")
    if not terms1 or not terms2:
        return 0.0

    score = len(terms1 & terms2) / len(terms1 | terms2)

    q_terms1 = concept_terms(card1.question)
    q_terms2 = concept_terms(card2.question)
    if q_terms1 and q_terms2:
        overlap = len(q_terms1 & q_terms2)
        score += overlap / min(len(q_terms1), len(q_terms2)) * CONCEPT_QUESTION_BONUS

    return min(score, 1.0)
