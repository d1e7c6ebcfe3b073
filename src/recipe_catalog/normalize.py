import unicodedata

# Exact normalized matches only: no synonyms, no fuzzy matching


def _strip_accents(s: str) -> str:
    decomposed = unicodedata.normalize("NFKD", s)
    return "".join(c for c in decomposed if not unicodedata.combining(c))


def normalize_name(s) -> str:
    """Return the comparison key for a category or ingredient name.

    Surrounding whitespace is stripped, the text is lower-cased and
    diacritics are removed, so " Crème ", "creme" and "CRÈME" share one key.
    Anything that is not a string normalizes to "".
    """
    if not isinstance(s, str) or not s:
        return ""
    w = s.strip().lower()
    return _strip_accents(w)


def names_match(a, b) -> bool:
    """Return True if both names normalize to the same key."""
    return normalize_name(a) == normalize_name(b)
