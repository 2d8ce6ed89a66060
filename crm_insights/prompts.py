"""Prompt construction for insight and sentiment analysis."""

from .models import Account

NO_DATA_SENTINEL = "No CRM data found matching the specified filters."
NO_TRANSCRIPTS_SENTINEL = "No meeting transcripts found in the provided data."

ACTIVITY_SEPARATOR = "---\n\n"
TRANSCRIPT_DELIMITER = "\n\n---\n\n"

INSIGHT_SYSTEM_PROMPT = """You are a world-class sales analyst and strategist. You will be given a collection of sales meeting transcripts, emails, and notes from a CRM for a specific sales team or representative over a period of time.
Your task is to analyze this data in aggregate to answer a specific strategic question.
Look for patterns, recurring themes, customer pain points, competitive mentions, and reasons for wins or losses.
Synthesize your findings into a concise, actionable report. Use markdown for formatting (e.g., headings, lists, bold text).
Base your answer ONLY on the provided data. Do not invent information. For every key finding, provide citations of at least 2 - 4 customer records with a snippet of the verbatim.

Here is the aggregated CRM data:
{context}"""

SENTIMENT_SYSTEM_PROMPT = (
    "You are a sentiment analysis expert. Analyze the provided meeting transcripts. "
    "Determine the overall sentiment and identify key moments. "
    "Record your analysis with the record_sentiment tool."
)

SENTIMENT_SCHEMA = {
    "type": "object",
    "properties": {
        "overallScore": {
            "type": "number",
            "description": "A score from -1.0 (very negative) to 1.0 (very positive), representing the overall sentiment.",
        },
        "summary": {
            "type": "string",
            "description": 'A brief, one-sentence summary of the overall customer sentiment (e.g., "Generally positive", "Mixed with concerns about pricing").',
        },
        "keyMoments": {
            "type": "array",
            "description": "A list of 3-5 specific quotes from the transcripts that are strong indicators of sentiment.",
            "items": {
                "type": "object",
                "properties": {
                    "quote": {
                        "type": "string",
                        "description": "The verbatim quote from the transcript.",
                    },
                    "sentiment": {
                        "type": "string",
                        "enum": ["Positive", "Negative", "Neutral"],
                        "description": "The sentiment of this specific quote.",
                    },
                    "accountName": {
                        "type": "string",
                        "description": "The name of the account from which the quote was taken.",
                    },
                },
                "required": ["quote", "sentiment", "accountName"],
            },
        },
    },
    "required": ["overallScore", "summary", "keyMoments"],
}


def format_full_context(accounts: list[Account]) -> str:
    """
    Serialize accounts and all their activities for insight generation.

    Args:
        accounts: Filtered accounts

    Returns:
        The aggregated CRM context, or NO_DATA_SENTINEL if there is no activity
    """
    if not any(account.activities for account in accounts):
        return NO_DATA_SENTINEL

    parts = ["--- AGGREGATED CRM DATA START ---\n\n"]

    for account in accounts:
        parts.append(f"== Account: {account.name} | AE: {account.ae} ==\n\n")
        for activity in account.activities:
            parts.append(f"Date: {activity.date}\n")
            parts.append(f"Type: {activity.type.capitalize()}\n")
            parts.append(f"Summary: {activity.summary}\n")
            parts.append(f"Details/Transcript:\n{activity.content}\n\n")
            parts.append(ACTIVITY_SEPARATOR)

    parts.append("--- AGGREGATED CRM DATA END ---")
    return "".join(parts)


def format_sentiment_context(accounts: list[Account]) -> str:
    """
    Concatenate meeting transcripts for sentiment analysis.

    Notes and emails are skipped.

    Returns:
        One block per meeting, or NO_TRANSCRIPTS_SENTINEL if there are none
    """
    blocks = [
        f"Account: {account.name}\nTranscript:\n{activity.content}"
        for account in accounts
        for activity in account.activities
        if activity.type == "meeting"
    ]
    if not blocks:
        return NO_TRANSCRIPTS_SENTINEL
    return TRANSCRIPT_DELIMITER.join(blocks)


def build_insight_system_prompt(context: str) -> str:
    """Embed the formatted CRM context in the analyst instruction."""
    return INSIGHT_SYSTEM_PROMPT.format(context=context)
