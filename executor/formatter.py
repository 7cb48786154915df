"""
Answer text formatting.

Builds the user-facing answer and the thread title. Pure functions:
the same inputs always produce the same text.
"""

ANSWER_PREFIX = "Based on the stored data (range {date_from} - {date_to})"
NO_DATA_SENTENCE = "No data was found to answer this question."


def build_answer(date_from: str, date_to: str, summary_lines: list[str]) -> str:
    """
    Join tool summaries under the range prefix.

    Falls back to a fixed sentence when no tool produced a summary.
    """
    prefix = ANSWER_PREFIX.format(date_from=date_from, date_to=date_to)
    body = " ".join(summary_lines) if summary_lines else NO_DATA_SENTENCE
    return f"{prefix}: {body}"


def truncate_title(question: str, max_length: int = 96) -> str:
    """Thread title from the first question, with an ellipsis when cut."""
    normalized = question.strip()
    if len(normalized) <= max_length:
        return normalized
    return f"{normalized[:max_length - 3]}..."
