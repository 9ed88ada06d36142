"""Name normalization utilities for alias and name matching.

Handles common variations across providers and user input:
- Whitespace: "  Kansas   City " → "Kansas City"
- Suffixes: "Jr.", "Sr.", "III", "IV", "II"
- Punctuation: "P.J. Walker" → "pj walker"
- Accents: "Dončić" → "doncic"
- Case: "PATRICK MAHOMES" → "patrick mahomes"
"""
import re
import unicodedata


# Common name suffixes that should be removed for comparison
SUFFIXES = {
    'jr', 'sr', 'iii', 'iv', 'ii', 'v', 'vi', 'vii', 'viii', 'ix',
}


def clean_alias(text: str) -> str:
    """
    Collapse internal whitespace and strip the ends, keeping case.

    Aliases are stored as typed so display stays natural; comparison is
    case-insensitive at query time.

    Examples:
        >>> clean_alias("  Kansas   City ")
        'Kansas City'
        >>> clean_alias("   ")
        ''
    """
    if not text:
        return ""
    return ' '.join(text.split())


def normalize(name: str) -> str:
    """
    Normalize a name for loose comparison.

    Steps:
    1. Remove a trailing suffix (Jr, Sr, III, etc.)
    2. Strip accents
    3. Lowercase
    4. Remove punctuation (keep letters, numbers, spaces)
    5. Collapse whitespace

    Examples:
        >>> normalize("P.J. Walker")
        'pj walker'
        >>> normalize("Odell Beckham Jr.")
        'odell beckham'
        >>> normalize("Luka Dončić")
        'luka doncic'
    """
    if not name:
        return ""

    name = _remove_suffix(name)
    name = _strip_accents(name)
    name = name.lower()
    name = re.sub(r'[^\w\s]', '', name)
    return ' '.join(name.split())


def _remove_suffix(name: str) -> str:
    parts = name.split()
    if len(parts) > 1 and parts[-1].lower().replace('.', '') in SUFFIXES:
        return ' '.join(parts[:-1])
    return name


def _strip_accents(name: str) -> str:
    # NFD splits accented letters into base letter + combining mark
    normalized = unicodedata.normalize('NFD', name)
    return ''.join(c for c in normalized if unicodedata.category(c) != 'Mn')


def split_name(name: str) -> tuple[str, str]:
    """
    Split a full name into (first, last).

    Multi-word last names keep every word after the first:
    - "Patrick Mahomes" → ("Patrick", "Mahomes")
    - "Amon-Ra St. Brown" → ("Amon-Ra", "St. Brown")
    - "Odell Beckham Jr." → ("Odell", "Beckham")
    """
    parts = _remove_suffix(clean_alias(name)).split()

    if not parts:
        return ("", "")
    if len(parts) == 1:
        return (parts[0], "")
    return (parts[0], ' '.join(parts[1:]))
