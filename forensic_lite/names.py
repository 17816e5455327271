"""
Name lexicon for entity discovery and pronoun resolution.

Single given names are only treated as people when they appear here (or
after an honorific, or as a speaker label), which keeps sentence-initial
capitalized words out of the entity list.
"""

from typing import Optional

from .schemas import Gender


FEMALE_NAMES = {
    'alice', 'amanda', 'amy', 'angela', 'anna', 'anne', 'barbara', 'betty',
    'carol', 'caroline', 'catherine', 'charlotte', 'chloe', 'christine',
    'claire', 'diana', 'donna', 'dorothy', 'eleanor', 'elizabeth', 'ella',
    'emily', 'emma', 'eva', 'fatima', 'grace', 'hannah', 'helen', 'isabella',
    'jane', 'janet', 'jennifer', 'jessica', 'joan', 'julia', 'julie', 'karen',
    'kate', 'katherine', 'laura', 'linda', 'lisa', 'lucy', 'margaret', 'maria',
    'mary', 'megan', 'mia', 'michelle', 'nancy', 'natalie', 'nicole', 'olivia',
    'patricia', 'rachel', 'rebecca', 'rose', 'ruth', 'sandra', 'sarah',
    'sophia', 'sophie', 'susan', 'thandi', 'victoria', 'zanele', 'zoe',
}

MALE_NAMES = {
    'adam', 'alexander', 'andrew', 'anthony', 'arthur', 'ben', 'benjamin',
    'bob', 'brian', 'charles', 'chris', 'christopher', 'daniel', 'david',
    'edward', 'eric', 'frank', 'gary', 'george', 'harry', 'henry', 'jack',
    'jacob', 'james', 'jason', 'jeffrey', 'john', 'jonathan', 'joseph',
    'joshua', 'kevin', 'liam', 'mark', 'matthew', 'michael', 'mike',
    'muhammad', 'nathan', 'nicholas', 'noah', 'oliver', 'patrick', 'paul',
    'peter', 'richard', 'robert', 'ryan', 'samuel', 'scott', 'sipho',
    'stephen', 'steven', 'thabo', 'thomas', 'timothy', 'tom', 'william',
}

HONORIFICS = {
    'mr': Gender.MALE,
    'mrs': Gender.FEMALE,
    'ms': Gender.FEMALE,
    'miss': Gender.FEMALE,
    'dr': None,
    'prof': None,
}


def is_given_name(word: str) -> bool:
    word = word.lower()
    return word in FEMALE_NAMES or word in MALE_NAMES


def guess_gender(name: str, honorific: Optional[str] = None) -> Optional[Gender]:
    """Gender from an honorific or the first token of a name, None if unknown"""
    if honorific:
        gender = HONORIFICS.get(honorific.lower().rstrip('.'))
        if gender is not None:
            return gender
    first = name.split()[0].lower() if name.split() else ''
    if first in FEMALE_NAMES:
        return Gender.FEMALE
    if first in MALE_NAMES:
        return Gender.MALE
    return None
