# screening/utils/chunking.py

"""Splitting long text into overlapping chunks before embedding."""

DEFAULT_MAX_CHARS = 3200
DEFAULT_OVERLAP = 400


def chunk_text(text: str, max_chars: int = DEFAULT_MAX_CHARS, overlap: int = DEFAULT_OVERLAP) -> list[str]:
    """
    Split ``text`` into chunks of at most ``max_chars`` characters.

    Consecutive chunks share ``overlap`` characters so context crossing a
    boundary stays retrievable. A chunk is cut at the last sentence end
    (". ") when one exists in the second half of the window.

    Args:
        text: Text to split.
        max_chars: Upper bound on chunk length (embedding input limit).
        overlap: Characters repeated at the start of the next chunk.

    Returns:
        List of chunks; a single-element list when the text already fits.
    """
    if overlap >= max_chars:
        raise ValueError("overlap must be smaller than max_chars")
    if len(text) <= max_chars:
        return [text]

    chunks = []
    start = 0
    while start < len(text):
        end = start + max_chars
        if end >= len(text):
            chunks.append(text[start:])
            break
        last_period = text.rfind(". ", start, end + 1)
        if last_period > start + max_chars * 0.5 and last_period + 1 - overlap > start:
            end = last_period + 1
        chunks.append(text[start:end])
        start = end - overlap
    return chunks
