"""
Text Normalizer & Tokenizer
===========================

Pure helpers shared by every analysis stage:
1. Whitespace/punctuation normalization
2. Line and sentence splitting
3. Keyword extraction (stopword filtered, first-seen order)
4. Keyword relatedness between two texts
"""

import re
from typing import List, Iterable, Tuple


# =============================================================================
# Lexicons
# =============================================================================

NEGATION_WORDS = {
    'no', 'not', 'never', 'nor', 'none', 'nothing', 'nobody', 'neither',
    "didn't", "wasn't", "weren't", "won't", "don't", "doesn't", "can't",
    "couldn't", "wouldn't", "shouldn't", "isn't", "aren't", "haven't",
    "hasn't", "hadn't", 'cannot', 'deny', 'denied', 'denies',
    'refused', 'rejected',
}

STOPWORDS = {
    'the', 'and', 'for', 'are', 'but', 'not', 'you', 'all', 'can', 'had',
    'her', 'was', 'one', 'our', 'out', 'has', 'have', 'been', 'were',
    'they', 'this', 'that', 'with', 'from', 'will', 'would', 'there',
    'their', 'what', 'when', 'which', 'who', 'whom', 'how', 'why', 'where',
    'she', 'him', 'his', 'hers', 'them', 'your', 'yours', 'its', 'our',
    'ours', 'any', 'some', 'each', 'into', 'onto', 'over', 'than', 'then',
    'also', 'just', 'very', 'about', 'ever', 'did', 'does', 'doing', 'done',
    'being', 'shall', 'should', 'could', 'might', 'must', 'may', 'yes',
    'okay', 'well', 'like', 'because', 'since', 'while', 'these', 'those',
    'here', 'only', 'too', 'more', 'most', 'such', 'own', 'same', 'other',
    "i'm", "i've", "i'll", "i'd", "it's", "that's", "you're", "he's",
    "she's", "we're", "they're", "let's", 'really', 'actually', 'going',
    'get', 'got', 'said', 'say', 'told', 'tell', 'know', 'think', 'believe',
    'maybe', 'perhaps', 'please', 'thanks', 'thank', 'dear', 'regards',
} | NEGATION_WORDS

# Common abbreviations that end with a period but don't end a sentence
ABBREVIATIONS = {
    'mr', 'mrs', 'ms', 'dr', 'st', 'jr', 'sr', 'prof', 'inc', 'ltd', 'co',
    'corp', 'vs', 'approx', 'etc', 'e.g', 'i.e', 'jan', 'feb', 'mar',
    'apr', 'jun', 'jul', 'aug', 'sep', 'sept', 'oct', 'nov', 'dec',
}

_ZERO_WIDTH = re.compile("[\u200b\u200c\u200d\u2060\ufeff]")
_HORIZONTAL_SPACE = re.compile("[ \t\u00a0]+")
_SENTENCE_BOUNDARY = re.compile(r'(?<=[.!?])\s+')
_WORD = re.compile(r"[a-z]+(?:'[a-z]+)?")

_PUNCTUATION_MAP = {
    "\u2018": "'", "\u2019": "'", "\u201b": "'",
    "\u201c": '"', "\u201d": '"',
    "\u2013": "-", "\u2014": "-",
}


# =============================================================================
# Normalization & splitting
# =============================================================================

def normalize_whitespace(text: str) -> str:
    """CRLF to LF, strip zero-width chars, collapse horizontal whitespace, trim."""
    if not text:
        return ""
    text = text.replace('\r\n', '\n').replace('\r', '\n')
    text = _ZERO_WIDTH.sub('', text)
    for src, dst in _PUNCTUATION_MAP.items():
        text = text.replace(src, dst)
    lines = [_HORIZONTAL_SPACE.sub(' ', line).strip() for line in text.split('\n')]
    return '\n'.join(lines).strip()


def split_lines(text: str) -> List[str]:
    """Non-empty trimmed lines"""
    return [line for line in normalize_whitespace(text).split('\n') if line]


def split_sentences(text: str) -> List[str]:
    """
    Split text into sentences on . ! ? followed by whitespace.

    Emails and decimals never split (no whitespace after their dots);
    known abbreviations ("Mr.", "Inc.") are re-joined to the next chunk.
    Terminal punctuation is kept on each sentence.
    """
    sentences: List[str] = []
    for line in split_lines(text):
        pending = ""
        for chunk in _SENTENCE_BOUNDARY.split(line):
            chunk = chunk.strip()
            if not chunk:
                continue
            pending = f"{pending} {chunk}" if pending else chunk
            if _ends_with_abbreviation(pending):
                continue
            sentences.append(pending)
            pending = ""
        if pending:
            sentences.append(pending)
    return sentences


def _ends_with_abbreviation(chunk: str) -> bool:
    if not chunk.endswith('.'):
        return False
    last = chunk[:-1].rsplit(' ', 1)[-1].lower()
    return last in ABBREVIATIONS


# =============================================================================
# Keywords
# =============================================================================

def tokenize(text: str) -> List[str]:
    """Lowercase word tokens, possessive 's removed"""
    tokens = []
    for token in _WORD.findall(text.lower()):
        if token.endswith("'s"):
            token = token[:-2]
        tokens.append(token)
    return tokens


def extract_keywords(text: str) -> Tuple[str, ...]:
    """Distinct meaningful words (len > 2, not stopwords) in first-seen order"""
    seen = []
    for token in tokenize(text):
        if len(token) > 2 and token not in STOPWORDS and token not in seen:
            seen.append(token)
    return tuple(seen)


def relatedness(words1: Iterable[str], words2: Iterable[str]) -> float:
    """Overlap of two keyword sets over the smaller set (0.5 if either is empty)"""
    set1, set2 = set(words1), set(words2)
    if not set1 or not set2:
        return 0.5  # Uncertain
    return len(set1 & set2) / min(len(set1), len(set2))


def excerpt(text: str, limit: int = 160) -> str:
    """Shorten text for descriptions"""
    text = text.strip()
    if len(text) <= limit:
        return text
    return text[:limit - 3].rstrip() + "..."
