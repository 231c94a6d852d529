import re
from typing import Optional

# Words left lower-case in titles unless they open or close the name
MINOR_WORDS = frozenset({
    "a", "an", "and", "as", "at", "but", "by", "en", "for", "if", "in",
    "nor", "of", "on", "or", "per", "the", "to", "v", "v.", "vs", "vs.", "via"
})

_WHITESPACE = re.compile(r"(\s+)")
_PART_SEPARATORS = re.compile(r"([-/])")
_LEADING_LOWER = re.compile(r"^([^0-9A-Za-z]*)([a-z])")
_EDGE_PUNCTUATION = "()[]{}\"',;:!?"
# A word after one of these starts a subphrase and is always capitalized
_SUBPHRASE_ENDINGS = (":", ";", "?", "!", ".")

def _capitalize(word: str) -> str:
    """Upper-case the first letter of each hyphen/slash separated part."""
    parts = _PART_SEPARATORS.split(word)
    return "".join(
        _LEADING_LOWER.sub(lambda m: m.group(1) + m.group(2).upper(), part)
        for part in parts
    )

def _is_minor(word: str) -> bool:
    return word in MINOR_WORDS or word.strip(_EDGE_PUNCTUATION) in MINOR_WORDS

def title_case(text: str) -> str:
    """Title-case text, keeping minor words lower-case inside the string."""
    tokens = _WHITESPACE.split(text)
    word_positions = [i for i, token in enumerate(tokens) if token and not token.isspace()]
    if not word_positions:
        return text

    first, last = word_positions[0], word_positions[-1]
    previous = None
    for i in word_positions:
        word = tokens[i]
        starts_subphrase = (
            previous is not None
            and previous.endswith(_SUBPHRASE_ENDINGS)
            and not _is_minor(previous)
        )
        previous = word
        if i not in (first, last) and not starts_subphrase and _is_minor(word):
            continue
        tokens[i] = _capitalize(word)

    return "".join(tokens)

def normalize_name(raw_name: Optional[str]) -> str:
    """Normalize an upstream station name for display.

    >>> normalize_name("LONGPORT (INSIDE), GREAT EGG HARBOR INLET")
    'Longport (Inside), Great Egg Harbor Inlet'
    """
    if raw_name is None:
        return ""
    text = f"{raw_name}".lower().replace("u.s.", "U.S.")
    return title_case(text)
