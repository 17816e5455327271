"""
Entity Resolver - Who is who across the evidence
================================================

Three steps:
1. Discovery: regex extractors for emails, phone numbers, bank accounts,
   organisations, capitalized names, given names and speaker labels
2. Merge: candidates sharing an identifier collapse into one canonical
   entity (transitively); statements are attributed by speaker
3. Alias resolution: pronouns and relational phrases ("my partner", "the
   defendant") are resolved to canonical ids by recency and name matching

Nothing here raises on odd input; no matches just means no entities.
"""

import re
import hashlib
import logging
from abc import ABC, abstractmethod
from typing import List, Dict, Optional, Tuple, Iterable
from dataclasses import dataclass, field, replace
from datetime import datetime

from .config import Settings, get_settings
from .dates import extract_dates
from .models import AliasResolution, Entity, Statement
from .names import HONORIFICS, guess_gender, is_given_name
from .schemas import AliasKind, EntityKind, Gender
from .tokenizer import split_sentences, normalize_whitespace

logger = logging.getLogger(__name__)


# =============================================================================
# Patterns
# =============================================================================

_NAME_WORD = r"[A-Z][a-z]+(?:-[A-Z]?[a-z]+|'[A-Z][a-z]+)?"

EMAIL_PATTERN = re.compile(r'[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}')
PHONE_PATTERN = re.compile(r'(?<![\w/.])\+?\d[\d \-().]{8,}\d(?![\w/])')
IBAN_PATTERN = re.compile(r'\b[A-Z]{2}\d{2}[A-Z0-9]{10,30}\b')
ACCOUNT_PATTERN = re.compile(
    r'\b(?:account|acct|acc|a/c)\b\.?\s*(?:no\.?|number|#)?\s*:?\s*(\d[\d \-]{6,24}\d)',
    re.IGNORECASE
)
ORG_PATTERN = re.compile(
    r"\b((?:[A-Z][A-Za-z&'\-]*[ \t]+){1,5}"
    r"(?:Ltd|LLC|Inc|Corp|Corporation|Bank|Trust|Group|Holdings|Partners))\b\.?"
)
HONORIFIC_PATTERN = re.compile(
    r"\b(Mr|Mrs|Ms|Miss|Dr|Prof)\.?[ \t]+(" + _NAME_WORD + r"(?:[ \t]+" + _NAME_WORD + r")*)"
)
NAME_PATTERN = re.compile(r"\b" + _NAME_WORD + r"(?:[ \t]+" + _NAME_WORD + r")+\b")
GIVEN_NAME_PATTERN = re.compile(r"\b" + _NAME_WORD + r"\b")

PRONOUN_PATTERN = re.compile(r"\b(he|him|his|she|her|hers|they|them|their)\b", re.IGNORECASE)

PRONOUN_GENDER = {
    'he': Gender.MALE, 'him': Gender.MALE, 'his': Gender.MALE,
    'she': Gender.FEMALE, 'her': Gender.FEMALE, 'hers': Gender.FEMALE,
    'they': None, 'them': None, 'their': None,
}

_RELATION = (
    r"(business\s+partner|partner|colleague|friend|wife|husband|brother|sister|"
    r"son|daughter|mother|father|boss|manager|employer|employee|lawyer|attorney|"
    r"accountant|agent|assistant)"
)
_ROLE = (
    r"(defendant|plaintiff|claimant|respondent|applicant|accused|witness|buyer|"
    r"seller|tenant|landlord|debtor|creditor)"
)
_FRAGMENT = r"(" + _NAME_WORD + r"(?:[ \t]+" + _NAME_WORD + r"){0,3})"

# (pattern, phrase template, fragment group, relation group, phrase names the entity itself)
RELATIONAL_PATTERNS = [
    (re.compile(r"\b[Mm]y\s+" + _RELATION + r",?\s+" + _FRAGMENT), "my {rel}", 2, 1, True),
    (re.compile(r"\b[Tt]he\s+" + _ROLE + r",?\s+" + _FRAGMENT), "the {rel}", 2, 1, True),
    (re.compile(r"\b" + _FRAGMENT + r"\s*(?:,|\()\s*the\s+" + _ROLE + r"\b"), "the {rel}", 1, 2, True),
    (re.compile(r"\b" + _FRAGMENT + r"'s\s+" + _RELATION + r"\b"), "{name}'s {rel}", 1, 2, False),
]

COMMON_PHRASES = {
    'the company', 'the bank', 'the court', 'dear sir', 'kind regards',
    'best regards', 'yours sincerely', 'yours faithfully', 'the agreement',
    'the contract', 'the deal', 'the money', 'the payment', 'good morning',
    'good afternoon', 'good evening',
}

_MONTH_WORDS = {
    'january', 'february', 'march', 'april', 'may', 'june', 'july', 'august',
    'september', 'october', 'november', 'december',
}
_DAY_WORDS = {'monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday'}

# Capitalized words stripped from the front of a name match
LEADING_NOISE = {
    'the', 'a', 'an', 'dear', 'hi', 'hello', 'hey', 'yesterday', 'today',
    'tomorrow', 'on', 'in', 'at', 'when', 'then', 'after', 'before', 'and',
    'but', 'so', 'if', 'kind', 'best', 'yours', 'good', 'from', 'to', 'cc',
    'subject', 're', 'also', 'my', 'our', 'his', 'her', 'their', 'as', 'by',
    'with', 'for', 'of', 'ask', 'tell', 'call', 'thanks', 'please', 'yes',
    'no', 'okay', 'ok', 'well', 'sorry', 'did', 'does', 'was', 'is', 'why',
    'what', 'where', 'who', 'how', 'regarding', 'per', 'attn',
} | _MONTH_WORDS | _DAY_WORDS

# Words that never appear inside a person's name
NON_NAME_WORDS = {
    'regards', 'sincerely', 'faithfully', 'morning', 'afternoon', 'evening',
    'company', 'court', 'agreement', 'contract', 'deal', 'money', 'payment',
    'sir', 'madam', 'invoice', 'receipt', 'statement', 'account', 'street',
    'road', 'avenue', 'whatsapp', 'email', 'exhibit', 'annexure', 'section',
    'act', 'high', 'supreme', 'magistrate', 'police', 'station',
} | _MONTH_WORDS | _DAY_WORDS


# =============================================================================
# Helpers
# =============================================================================

def entity_id_for(kind: EntityKind, name: str) -> str:
    """Deterministic entity id from kind + lowered name"""
    digest = hashlib.sha1(f"{kind.value}:{name.lower()}".encode("utf-8")).hexdigest()
    return f"ent_{digest[:12]}"


def names_match(a: str, b: str, whole_word: bool = False) -> bool:
    """Case-insensitive equality or containment either way (whole words only if asked)"""
    a, b = a.strip().lower(), b.strip().lower()
    if not a or not b:
        return False
    if a == b:
        return True
    shorter, longer = (a, b) if len(a) < len(b) else (b, a)
    if not whole_word:
        return shorter in longer
    return re.search(r'\b' + re.escape(shorter) + r'\b', longer) is not None


def find_entity(name: str, entities: Iterable[Entity], whole_word: bool = False) -> Optional[Entity]:
    """First entity named exactly `name`, else the first containment match"""
    entities = list(entities)
    lowered = name.strip().lower()
    for entity in entities:
        if any(n.lower() == lowered for n in entity.names):
            return entity
    for entity in entities:
        if any(names_match(name, n, whole_word) for n in entity.names):
            return entity
    return None


def _digits(value: str) -> str:
    return re.sub(r'\D', '', value)


def _account_key(value: str) -> str:
    return re.sub(r'[\s\-]', '', value).upper()


def _phones_match(a: str, b: str) -> bool:
    da, db = _digits(a), _digits(b)
    if da == db:
        return True
    # Same national number with and without country code
    return len(da) >= 9 and len(db) >= 9 and da[-9:] == db[-9:]


def _clean_name(raw: str) -> Optional[str]:
    """Strip leading noise words; None if what's left can't be a name"""
    words = raw.split()
    while words and words[0].lower() in LEADING_NOISE:
        words = words[1:]
    while words and words[-1].lower() in (_MONTH_WORDS | _DAY_WORDS):
        words = words[:-1]
    if not words:
        return None
    if any(w.lower() in NON_NAME_WORDS for w in words):
        return None
    if len(words) == 1 and not is_given_name(words[0]):
        return None
    return ' '.join(words)


# =============================================================================
# Discovery
# =============================================================================

@dataclass
class EntityCandidate:
    """Entity candidate before merging"""
    name: str
    kind: EntityKind
    index: int
    confidence: float
    gender: Optional[Gender] = None
    aliases: List[str] = field(default_factory=list)
    emails: List[str] = field(default_factory=list)
    phone_numbers: List[str] = field(default_factory=list)
    bank_accounts: List[str] = field(default_factory=list)
    mentions: int = 0

    @property
    def names(self) -> List[str]:
        return [self.name] + self.aliases


class EntityDiscoverer(ABC):
    """Strategy for finding entity candidates in raw text"""

    @abstractmethod
    def discover(self, text: str, statements: List[Statement]) -> List[EntityCandidate]:
        ...


class RegexEntityDiscoverer(EntityDiscoverer):
    """
    Independent regex extractors, applied in order of specificity so a span
    claimed by an organisation or email is not re-read as a person's name.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def discover(self, text: str, statements: List[Statement]) -> List[EntityCandidate]:
        text = normalize_whitespace(text or "")
        candidates: Dict[Tuple[EntityKind, str], EntityCandidate] = {}
        anchors: List[Tuple[int, int, EntityCandidate]] = []

        for start, end, name, kind, confidence, gender, email in self._name_matches(text):
            key = (kind, name.lower())
            candidate = candidates.get(key)
            if candidate is None:
                candidate = EntityCandidate(
                    name=name,
                    kind=kind,
                    index=len(candidates),
                    confidence=confidence,
                    gender=gender or (guess_gender(name) if kind == EntityKind.PERSON else None),
                )
                candidates[key] = candidate
            candidate.mentions += 1
            candidate.confidence = max(candidate.confidence, confidence)
            if candidate.gender is None and gender is not None:
                candidate.gender = gender
            if email and email.lower() not in [e.lower() for e in candidate.emails]:
                candidate.emails.append(email)
            anchors.append((start, end, candidate))

        self._attach_identifiers(text, anchors)
        self._add_speakers(statements, candidates)

        return list(candidates.values())

    def _name_matches(self, text: str):
        """
        Yield (start, end, name, kind, confidence, gender, email) in text order.
        """
        settings = self.settings
        taken: List[Tuple[int, int]] = []
        found = []

        def free(start: int, end: int) -> bool:
            return not any(start < t_end and end > t_start for t_start, t_end in taken)

        for match in EMAIL_PATTERN.finditer(text):
            taken.append(match.span())
            name = self._name_from_email(match.group())
            if name:
                found.append((match.start(), match.end(), name, EntityKind.PERSON,
                              settings.email_confidence, None, match.group()))

        for match in ORG_PATTERN.finditer(text):
            words = match.group(1).split()
            while words and words[0].lower() in LEADING_NOISE:
                words = words[1:]
            if len(words) < 2 or not free(*match.span()):
                continue
            taken.append(match.span())
            found.append((match.start(), match.end(), ' '.join(words), EntityKind.ORGANIZATION,
                          settings.organization_confidence, None, None))

        for match in HONORIFIC_PATTERN.finditer(text):
            if not free(*match.span()):
                continue
            name = _clean_name(match.group(2)) or match.group(2)
            if any(w.lower() in NON_NAME_WORDS for w in name.split()):
                continue
            taken.append(match.span())
            gender = HONORIFICS.get(match.group(1).lower())
            found.append((match.start(), match.end(), name, EntityKind.PERSON,
                          settings.name_confidence, gender, None))

        for match in NAME_PATTERN.finditer(text):
            if not free(*match.span()) or match.group().lower() in COMMON_PHRASES:
                continue
            name = _clean_name(match.group())
            if not name:
                continue
            taken.append(match.span())
            found.append((match.start(), match.end(), name, EntityKind.PERSON,
                          settings.name_confidence, None, None))

        for match in GIVEN_NAME_PATTERN.finditer(text):
            if not is_given_name(match.group()) or not free(*match.span()):
                continue
            taken.append(match.span())
            found.append((match.start(), match.end(), match.group(), EntityKind.PERSON,
                          settings.name_confidence, None, None))

        found.sort(key=lambda item: item[0])
        return found

    @staticmethod
    def _name_from_email(email: str) -> Optional[str]:
        """john.smith@x.com -> John Smith"""
        local = email.split('@', 1)[0]
        parts = [p for p in re.split(r'[._\-+]+', local) if p.isalpha()]
        if not parts:
            return None
        return ' '.join(p.capitalize() for p in parts)

    def _attach_identifiers(self, text: str, anchors: List[Tuple[int, int, EntityCandidate]]) -> None:
        """Attach phones/accounts to the nearest named anchor within the window"""
        settings = self.settings
        blocked = [(m.start, m.end) for m in extract_dates(text)]
        blocked.extend(m.span() for m in EMAIL_PATTERN.finditer(text))

        def overlaps(start: int, end: int) -> bool:
            return any(start < b_end and end > b_start for b_start, b_end in blocked)

        for match in list(IBAN_PATTERN.finditer(text)) + list(ACCOUNT_PATTERN.finditer(text)):
            value = match.group(1) if match.re is ACCOUNT_PATTERN else match.group()
            start, end = match.span()
            if match.re is ACCOUNT_PATTERN and not 8 <= len(_digits(value)) <= 20:
                continue
            blocked.append((start, end))
            owner = self._nearest(start, end, anchors, settings.identifier_window)
            if owner is None:
                logger.debug(f"Discarding account without nearby owner: {value}")
                continue
            if _account_key(value) not in [_account_key(a) for a in owner.bank_accounts]:
                owner.bank_accounts.append(value.strip())

        for match in PHONE_PATTERN.finditer(text):
            start, end = match.span()
            value = match.group().strip()
            if overlaps(start, end) or len(_digits(value)) < settings.phone_min_digits:
                continue
            owner = self._nearest(start, end, anchors, settings.identifier_window)
            if owner is None:
                logger.debug(f"Discarding phone without nearby owner: {value}")
                continue
            if not any(_phones_match(value, p) for p in owner.phone_numbers):
                owner.phone_numbers.append(value)

    @staticmethod
    def _nearest(
        start: int,
        end: int,
        anchors: List[Tuple[int, int, EntityCandidate]],
        window: int
    ) -> Optional[EntityCandidate]:
        best = None
        best_distance = window + 1
        for a_start, a_end, candidate in anchors:
            if a_end <= start:
                distance = start - a_end
            elif a_start >= end:
                distance = a_start - end
            else:
                distance = 0
            if distance < best_distance:
                best, best_distance = candidate, distance
        return best

    def _add_speakers(
        self,
        statements: List[Statement],
        candidates: Dict[Tuple[EntityKind, str], EntityCandidate]
    ) -> None:
        """Speaker labels not found in the text become candidates of their own"""
        counts: Dict[str, int] = {}
        order: List[str] = []
        for statement in statements:
            if not statement.speaker:
                continue
            if statement.speaker not in counts:
                order.append(statement.speaker)
                counts[statement.speaker] = 0
            counts[statement.speaker] += 1

        for speaker in order:
            if any(
                names_match(speaker, n, self.settings.merge_whole_word_names)
                for c in candidates.values() for n in c.names
            ):
                continue
            key = (EntityKind.PERSON, speaker.lower())
            candidates[key] = EntityCandidate(
                name=speaker,
                kind=EntityKind.PERSON,
                index=len(candidates),
                confidence=self.settings.name_confidence,
                gender=guess_gender(speaker),
                mentions=counts[speaker],
            )


# =============================================================================
# Resolver
# =============================================================================

@dataclass
class ResolutionResult:
    """Result from entity resolution"""
    entities: List[Entity]
    statements: List[Statement]
    aliases: List[AliasResolution]


class EntityResolver:
    """
    Discovers, merges and attributes entities.

    Merge rule: same kind and at least one identifier (name, alias, email,
    phone, account) equal or whole-word contained; transitive. The survivor
    is the candidate with the most mentions (ties: earliest discovered).
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        discoverer: Optional[EntityDiscoverer] = None
    ):
        self.settings = settings or get_settings()
        self.discoverer = discoverer or RegexEntityDiscoverer(self.settings)

    def resolve(self, statements: List[Statement], raw_text: str) -> ResolutionResult:
        """
        Resolve entities, attribute statements and resolve aliases.

        Args:
            statements: Extracted statements (any order, ids unique)
            raw_text: Combined raw text the statements came from

        Returns:
            ResolutionResult with canonical entities (discovery order),
            statements with entity_id set, and alias resolutions
        """
        start_time = datetime.now()

        entities = self.resolve_entities(statements, raw_text)
        attributed = [s for e in entities for s in e.statements]
        by_id = {s.id: s for s in attributed}
        resolved_statements = [by_id.get(s.id, s) for s in statements]

        aliases = self._resolve(raw_text, entities)
        for resolution, names_entity in aliases:
            if not (resolution.resolved and names_entity):
                continue
            entity = next(e for e in entities if e.id == resolution.entity_id)
            if resolution.mention.lower() not in [a.lower() for a in entity.aliases]:
                entity.aliases.append(resolution.mention)

        elapsed_ms = (datetime.now() - start_time).total_seconds() * 1000
        logger.info(
            f"Entity resolution complete: {len(entities)} entities, "
            f"{len(attributed)}/{len(statements)} statements attributed, "
            f"{len(aliases)} aliases in {elapsed_ms:.1f}ms"
        )

        return ResolutionResult(
            entities=entities,
            statements=resolved_statements,
            aliases=[resolution for resolution, _ in aliases],
        )

    def resolve_entities(self, statements: List[Statement], raw_text: str) -> List[Entity]:
        candidates = self.discoverer.discover(raw_text, statements)
        entities = self._merge(candidates)
        entities = [e for e in entities if e.mentions >= self.settings.min_entity_mentions]
        self._attribute(statements, entities)
        return entities

    # =========================================================================
    # Merge
    # =========================================================================

    def _merge(self, candidates: List[EntityCandidate]) -> List[Entity]:
        parent = list(range(len(candidates)))

        def find(i: int) -> int:
            while parent[i] != i:
                parent[i] = parent[parent[i]]
                i = parent[i]
            return i

        for i, a in enumerate(candidates):
            for j in range(i + 1, len(candidates)):
                if self._should_merge(a, candidates[j]):
                    root_i, root_j = find(i), find(j)
                    if root_i != root_j:
                        parent[max(root_i, root_j)] = min(root_i, root_j)

        groups: Dict[int, List[EntityCandidate]] = {}
        for i, candidate in enumerate(candidates):
            groups.setdefault(find(i), []).append(candidate)

        entities = []
        for root in sorted(groups):
            group = groups[root]
            entities.append(self._collapse(group))
            if len(group) > 1:
                logger.debug(f"Merged {[c.name for c in group]} into {entities[-1].primary_name}")
        return entities

    def _should_merge(self, a: EntityCandidate, b: EntityCandidate) -> bool:
        if a.kind != b.kind:
            return False
        whole_word = self.settings.merge_whole_word_names
        if any(names_match(x, y, whole_word) for x in a.names for y in b.names):
            return True
        if any(x.lower() == y.lower() for x in a.emails for y in b.emails):
            return True
        if any(_phones_match(x, y) for x in a.phone_numbers for y in b.phone_numbers):
            return True
        return any(_account_key(x) == _account_key(y) for x in a.bank_accounts for y in b.bank_accounts)

    @staticmethod
    def _collapse(group: List[EntityCandidate]) -> Entity:
        survivor = group[0]
        for candidate in group[1:]:
            if candidate.mentions > survivor.mentions:
                survivor = candidate

        def union(values: List[str], key) -> List[str]:
            out: List[str] = []
            for value in values:
                if key(value) not in [key(v) for v in out]:
                    out.append(value)
            return out

        names = union([n for c in group for n in c.names], str.lower)
        gender = survivor.gender
        if gender is None:
            gender = next((c.gender for c in group if c.gender is not None), None)

        return Entity(
            id=entity_id_for(survivor.kind, survivor.name),
            primary_name=survivor.name,
            kind=survivor.kind,
            gender=gender,
            aliases=[n for n in names if n.lower() != survivor.name.lower()],
            emails=union([e for c in group for e in c.emails], str.lower),
            phone_numbers=union([p for c in group for p in c.phone_numbers], _digits),
            bank_accounts=union([a for c in group for a in c.bank_accounts], _account_key),
            mentions=sum(c.mentions for c in group),
            confidence=max(c.confidence for c in group),
        )

    # =========================================================================
    # Attribution
    # =========================================================================

    def _attribute(self, statements: List[Statement], entities: List[Entity]) -> None:
        """Attach each speaker-matched statement (with entity_id set) to its entity"""
        cache: Dict[str, Optional[Entity]] = {}
        for statement in statements:
            if not statement.speaker:
                continue
            if statement.speaker not in cache:
                cache[statement.speaker] = find_entity(
                    statement.speaker, entities, self.settings.merge_whole_word_names
                )
            entity = cache[statement.speaker]
            if entity is None:
                continue
            entity.statements.append(replace(statement, entity_id=entity.id))

    # =========================================================================
    # Alias resolution
    # =========================================================================

    def resolve_aliases(self, text: str, entities: List[Entity]) -> List[AliasResolution]:
        return [resolution for resolution, _ in self._resolve(text, entities)]

    def _resolve(self, text: str, entities: List[Entity]) -> List[Tuple[AliasResolution, bool]]:
        """
        Resolve pronouns and relational phrases sentence by sentence.

        Pronouns go to the most recently mentioned entity of matching gender
        (any entity for they/them/their); with no antecedent they are
        reported unresolved, never guessed.
        """
        if not text or not entities:
            return []

        lookup: Dict[str, Entity] = {}
        folded: Dict[str, Entity] = {}
        for entity in entities:
            for name in entity.names:
                lookup.setdefault(name.lower(), entity)
                folded.setdefault(name.casefold(), entity)
        alternatives = sorted(lookup, key=len, reverse=True)
        mention_pattern = re.compile(
            r"\b(" + "|".join(re.escape(n) for n in alternatives) + r")\b",
            re.IGNORECASE
        )

        results: List[Tuple[int, int, AliasResolution, bool]] = []
        last_by_gender: Dict[Optional[Gender], Entity] = {}

        for index, sentence in enumerate(split_sentences(text)):
            for pattern, template, fragment_group, relation_group, names_entity in RELATIONAL_PATTERNS:
                for match in pattern.finditer(sentence):
                    fragment = _clean_name(match.group(fragment_group)) or match.group(fragment_group)
                    relation = re.sub(r'\s+', ' ', match.group(relation_group).lower())
                    entity = find_entity(fragment, entities, self.settings.merge_whole_word_names)
                    results.append((index, match.start(), AliasResolution(
                        mention=template.format(rel=relation, name=fragment),
                        entity_id=entity.id if entity else None,
                        confidence=self.settings.relational_confidence if entity else 0.0,
                        kind=AliasKind.RELATIONAL,
                        sentence_index=index,
                        relation=relation,
                    ), names_entity))

            events = [(m.start(), 'entity', m.group(1)) for m in mention_pattern.finditer(sentence)]
            events += [(m.start(), 'pronoun', m.group(1)) for m in PRONOUN_PATTERN.finditer(sentence)]
            events.sort(key=lambda e: e[0])

            for position, kind, value in events:
                if kind == 'entity':
                    # IGNORECASE also matches Unicode case variants (long s, Kelvin sign)
                    entity = lookup.get(value.lower()) or folded.get(value.casefold())
                    if entity is None:
                        continue
                    last_by_gender[None] = entity
                    if entity.gender is not None:
                        last_by_gender[entity.gender] = entity
                    continue
                if value.casefold() not in PRONOUN_GENDER:
                    continue
                antecedent = last_by_gender.get(PRONOUN_GENDER[value.casefold()])
                results.append((index, position, AliasResolution(
                    mention=value,
                    entity_id=antecedent.id if antecedent else None,
                    confidence=self.settings.pronoun_confidence if antecedent else 0.0,
                    kind=AliasKind.PRONOUN,
                    sentence_index=index,
                ), False))

        results.sort(key=lambda r: (r[0], r[1]))
        return [(resolution, names_entity) for _, _, resolution, names_entity in results]


# Convenience functions

def resolve_entities(
    statements: List[Statement],
    raw_text: str,
    settings: Optional[Settings] = None
) -> List[Entity]:
    """Discover, merge and attribute entities"""
    return EntityResolver(settings).resolve_entities(statements, raw_text)


def resolve_aliases(
    text: str,
    entities: List[Entity],
    settings: Optional[Settings] = None
) -> List[AliasResolution]:
    """Resolve pronouns and relational phrases in text to entity ids"""
    return EntityResolver(settings).resolve_aliases(text, entities)
