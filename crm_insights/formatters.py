"""Console formatters for analysis results."""

from typing import Optional

from .config import Settings
from .models import AnalysisResult, FilterOptions, SentimentResult

SENTIMENT_ICONS = {"Positive": "👍", "Negative": "👎", "Neutral": "➖"}


def sentiment_label(score: float) -> str:
    """Bucket a [-1, 1] score into a label."""
    if score < -0.2:
        return "Negative"
    if score > 0.2:
        return "Positive"
    return "Mixed"


def format_score_bar(score: float, width: int = 20) -> str:
    """Render a [-1, 1] score as a fixed-width bar."""
    filled = round((score + 1) / 2 * width)
    filled = max(0, min(width, filled))
    return "[" + "█" * filled + "░" * (width - filled) + "]"


def format_sentiment_report(result: Optional[SentimentResult]) -> str:
    """
    Format a sentiment result for console output.

    Args:
        result: SentimentResult, or None when no sentiment is available

    Returns:
        Formatted string for console display
    """
    if result is None:
        return "No sentiment data available."

    output = []
    output.append("\n" + "=" * 70)
    output.append("MEETING SENTIMENT")
    output.append("=" * 70)

    score = result.overall_score
    output.append(
        f"\n{format_score_bar(score)} {score:+.2f} ({sentiment_label(score)})"
    )
    output.append(f"💡 {result.summary}")

    if result.key_moments:
        output.append("\nKey moments:")
        for moment in result.key_moments:
            icon = SENTIMENT_ICONS.get(moment.sentiment, "•")
            output.append(f"  {icon} \"{moment.quote}\"")
            output.append(f"     - {moment.account_name}")

    output.append("\n" + "=" * 70)
    return "\n".join(output)


def format_analysis_summary(result: AnalysisResult) -> str:
    """One-line scope summary for a finished analysis."""
    return (
        f"📊 {result.account_count} account(s), {result.activity_count} activity record(s) "
        f"| status: {result.status.value}"
    )


def format_filter_options(options: FilterOptions) -> str:
    """Format available filter choices."""
    return "\n".join(
        [
            f"  • Teams:    {', '.join(options.teams)}",
            f"  • AEs:      {', '.join(options.aes)}",
            f"  • Tiers:    {', '.join(options.tiers)}",
            f"  • Segments: {', '.join(options.segments)}",
        ]
    )


def format_config_status(settings: Settings) -> str:
    """Report which credentials are configured, never their values."""
    llm = "✅ CONFIGURED" if settings.llm_api_key else "❌ MISSING"
    feed = (
        f"✅ {settings.crm_feed_url}"
        if settings.crm_feed_url
        else "⚠️  NOT SET (using sample data)"
    )
    return "\n".join(
        [
            f"  • LLM key:   {llm}",
            f"  • LLM model: {settings.llm_model}",
            f"  • CRM feed:  {feed}",
        ]
    )
