"""Splitting of oversized text into bounded chunks."""

DEFAULT_MAX_CHUNK_SIZE = 2000


def chunk_text(text: str, max_size: int = DEFAULT_MAX_CHUNK_SIZE) -> list[str]:
    """
    Split text into contiguous chunks of at most max_size characters.

    Each chunk ends right after the last newline inside its window when there
    is one, so lines are only cut when a single line exceeds max_size.
    Joining the chunks in order gives back the original text exactly.

    Args:
        text: Text to split
        max_size: Maximum characters per chunk

    Returns:
        Ordered list of chunks; text no longer than max_size yields one chunk

    Raises:
        ValueError: If max_size is not positive
    """
    if max_size < 1:
        raise ValueError(f"max_size must be positive, got {max_size}")

    if len(text) <= max_size:
        return [text]

    chunks: list[str] = []
    start = 0
    while start < len(text):
        end = start + max_size
        if end >= len(text):
            chunks.append(text[start:])
            break

        # Prefer to break after a newline within the window
        newline = text.rfind("\n", start, end)
        if newline != -1:
            end = newline + 1

        chunks.append(text[start:end])
        start = end

    return chunks
