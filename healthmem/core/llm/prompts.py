"""Prompt templates for health summaries."""

from healthmem.models.health import SummaryType

SUMMARY_PROMPT = """Write a {summary_type} summary of the following health records:

{records}

The summary must include:
- Main diagnoses or symptoms
- Prescribed medications and treatment changes
- Relevant lab or test results
- Trends observed in vital signs
- Pending recommendations or follow-ups

Format: clear, structured text addressed to the patient."""

FALLBACK_HEADER = "[Automatic {summary_type} summary]\n\nTotal records: {count}"


def create_summary_prompt(contents: list[str], summary_type: SummaryType) -> str:
    """
    Build the generation prompt for a period summary.

    Args:
        contents: Record contents
        summary_type: Period covered

    Returns:
        Prompt text
    """
    return SUMMARY_PROMPT.format(
        summary_type=SummaryType(summary_type).value,
        records="\n\n".join(contents),
    )


def create_fallback_summary(contents: list[str], summary_type: SummaryType) -> str:
    """
    Rule-based summary used when no model is available.

    Args:
        contents: Record contents
        summary_type: Period covered

    Returns:
        Record-count header followed by the contents separated by blank lines
    """
    header = FALLBACK_HEADER.format(
        summary_type=SummaryType(summary_type).value, count=len(contents)
    )
    return "\n\n".join([header, *contents])
