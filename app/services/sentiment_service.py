# app/services/sentiment_service.py
import re
from typing import Dict, Union
from afinn import Afinn

POSITIVE_THRESHOLD = 0.1
NEGATIVE_THRESHOLD = -0.1
LOW_MAGNITUDE_LIMIT = 0.2
MEDIUM_MAGNITUDE_LIMIT = 0.5

_PUNCTUATION = re.compile(r"[.,/#!$%^&*;:{}=_`\"~()]")

# a lexicon word right after one of these counts with the opposite sign
NEGATORS = frozenset([
    "cant", "can't", "dont", "don't", "doesnt", "doesn't", "not", "non",
    "wont", "won't", "isnt", "isn't",
])

_afinn = Afinn(language="en")


def _tokenize(text: str):
    cleaned = _PUNCTUATION.sub("", text.lower().replace("\n", " "))
    return cleaned.split()


def label_for(comparative: float) -> str:
    if comparative > POSITIVE_THRESHOLD:
        return "positive"
    if comparative < NEGATIVE_THRESHOLD:
        return "negative"
    return "neutral"


def magnitude_for(comparative: float) -> str:
    strength = abs(comparative)
    if strength < LOW_MAGNITUDE_LIMIT:
        return "low"
    if strength < MEDIUM_MAGNITUDE_LIMIT:
        return "medium"
    return "high"


def analyze_sentiment(text: str) -> Dict[str, Union[float, str]]:
    """
    Score text with the AFINN lexicon, one token at a time.

    A word that follows a negator ("not", "don't") counts with the opposite
    sign. `comparative` is the raw score divided by the token count, so a short
    angry message weighs more than the same words buried in a long one.
    """
    tokens = _tokenize(text or "")
    score = 0.0
    for i, token in enumerate(tokens):
        token_score = float(_afinn.score(token))
        if token_score and i > 0 and tokens[i - 1] in NEGATORS:
            token_score = -token_score
        score += token_score
    comparative = score / len(tokens) if tokens else 0.0
    return {
        "score": score,
        "comparative": comparative,
        "label": label_for(comparative),
        "magnitude": magnitude_for(comparative),
    }


def is_strongly_negative(sentiment) -> bool:
    if not sentiment:
        return False
    return sentiment.get("label") == "negative" and sentiment.get("magnitude") == "high"
