"""Parsing of the model's two-line ``Name:`` / ``Why:`` output."""

from plantnamer.models.name import NameResult

NAME_PREFIX = "name:"
WHY_PREFIX = "why:"

NAME_MAX_LENGTH = 30
WHY_MAX_WORDS = 14

# Double quotes are never part of a name, so any run of them at either end goes
DOUBLE_QUOTES = "\"“”"

# Single quotes double as apostrophes (Rootin' Tootin', 'Tis the Fern); only a
# matching pair around the whole field is removed
SINGLE_QUOTE_PAIRS = (("'", "'"), ("‘", "’"))


def strip_wrapping_quotes(text: str) -> str:
    """Remove surrounding whitespace and wrapping quotes.

    Args:
        text: The text to clean.

    Returns:
        The text without leading/trailing double quotes, and without one
        enclosing pair of single quotes. Apostrophes and inner quotes are kept.
    """
    cleaned = text.strip().strip(DOUBLE_QUOTES).strip()

    for opening, closing in SINGLE_QUOTE_PAIRS:
        if len(cleaned) >= 2 and cleaned.startswith(opening) and cleaned.endswith(closing):
            return cleaned[1:-1].strip()

    return cleaned


def count_words(text: str) -> int:
    """Count whitespace-delimited words."""
    return len(text.split())


def _find_prefixed(lines: list[str], prefix: str) -> str | None:
    for line in lines:
        if line.lower().startswith(prefix):
            return line[len(prefix) :]
    return None


def parse_model_output(
    output: str | None,
    name_max_length: int = NAME_MAX_LENGTH,
    why_max_words: int = WHY_MAX_WORDS,
) -> NameResult | None:
    """Parse raw model text into a name and rationale.

    Takes the first line starting with ``Name:`` and the first starting with
    ``Why:`` (case-insensitive), wherever they appear. Never raises.

    Args:
        output: Raw model text; None or non-string input is rejected.
        name_max_length: Longest acceptable name, in characters.
        why_max_words: Most words acceptable in the rationale.

    Returns:
        The parsed result, or None if the text does not match the format.
    """
    if not isinstance(output, str) or not output:
        return None

    lines = [line.strip() for line in output.splitlines()]
    lines = [line for line in lines if line]

    raw_name = _find_prefixed(lines, NAME_PREFIX)
    raw_why = _find_prefixed(lines, WHY_PREFIX)
    if raw_name is None or raw_why is None:
        return None

    name = strip_wrapping_quotes(raw_name)
    why = strip_wrapping_quotes(raw_why)

    if not name or not why:
        return None

    if len(name) > name_max_length:
        return None

    if count_words(why) > why_max_words:
        return None

    return NameResult(name=name, why=why)
