"""Main analyzer orchestrating the analysis workflow."""

import asyncio
import logging
from typing import Callable, Optional

from .config import Settings
from .crm_client import CrmAPIError
from .filters import filter_accounts
from .insights import InsightGenerator
from .llm_client import LLMClient
from .models import Account, AnalysisResult, AnalysisStatus, FilterCriteria, SentimentResult
from .prompts import format_full_context, format_sentiment_context
from .sentiment import SentimentExtractor
from .sources import AccountSource

logger = logging.getLogger(__name__)

FragmentHandler = Callable[[str], None]


def format_error_report(message: str) -> str:
    """Build the markdown shown in place of an insight when analysis fails."""
    return (
        f"### ⚠️ Analysis Error\n\n{message}\n\n"
        "**Troubleshooting:**\n"
        "- If this mentions a connection failure, the AI service or data feed is unreachable.\n"
        "- If it mentions an API key, check the `LLM_API_KEY` entry in your `.env` file."
    )


class InsightAnalyzer:
    """Orchestrates filtering, prompt formatting, insight and sentiment generation."""

    def __init__(self, settings: Settings, llm_client: Optional[LLMClient] = None):
        """Initialize the analyzer."""
        self.settings = settings
        self.llm_client = llm_client or LLMClient(settings)
        self.insight_generator = InsightGenerator(self.llm_client)
        self.sentiment_extractor = SentimentExtractor(self.llm_client, settings)

        self.latest_result: Optional[AnalysisResult] = None
        self._request_seq = 0

    async def analyze(
        self,
        accounts: list[Account],
        criteria: FilterCriteria,
        question: str,
        on_fragment: Optional[FragmentHandler] = None,
    ) -> AnalysisResult:
        """
        Answer a question over filtered accounts, with transcript sentiment.

        Insight and sentiment run concurrently against the same formatted
        inputs. A sentiment failure leaves the insight intact; an insight
        failure replaces it with an error report and marks the result failed.

        Args:
            accounts: Accounts from the data source
            criteria: Filters for this request
            question: The user's free-text question
            on_fragment: Called with each insight fragment as it arrives

        Returns:
            AnalysisResult for this request
        """
        self._request_seq += 1
        request_id = self._request_seq

        def transition(status: AnalysisStatus) -> None:
            logger.debug("Request %d -> %s", request_id, status.value)

        transition(AnalysisStatus.FILTERING)
        filtered = filter_accounts(accounts, criteria)
        activity_count = sum(len(a.activities) for a in filtered)

        transition(AnalysisStatus.FORMATTING)
        full_context = format_full_context(filtered)
        sentiment_context = format_sentiment_context(filtered)

        transition(AnalysisStatus.GENERATING)
        insight_outcome, sentiment_outcome = await asyncio.gather(
            self._collect_insight(full_context, question, on_fragment),
            self.sentiment_extractor.analyze_sentiment(sentiment_context),
            return_exceptions=True,
        )

        sentiment: Optional[SentimentResult] = None
        if isinstance(sentiment_outcome, BaseException):
            logger.warning("Sentiment analysis failed: %s", sentiment_outcome)
        else:
            sentiment = sentiment_outcome

        if isinstance(insight_outcome, BaseException):
            logger.error("Insight generation failed: %s", insight_outcome, exc_info=insight_outcome)
            error = str(insight_outcome)
            if insight_outcome.__cause__ is not None:
                error = f"{error} (cause: {insight_outcome.__cause__})"
            result = AnalysisResult(
                insight=format_error_report(error),
                sentiment=sentiment,
                status=AnalysisStatus.FAILED,
                error=error,
                account_count=len(filtered),
                activity_count=activity_count,
            )
        else:
            result = AnalysisResult(
                insight=insight_outcome,
                sentiment=sentiment,
                status=AnalysisStatus.COMPLETE,
                account_count=len(filtered),
                activity_count=activity_count,
            )
        transition(result.status)

        # Results of superseded requests are returned but never published
        if request_id == self._request_seq:
            self.latest_result = result
        else:
            logger.debug("Request %d superseded by %d", request_id, self._request_seq)

        return result

    async def analyze_from_source(
        self,
        source: AccountSource,
        criteria: FilterCriteria,
        question: str,
        on_fragment: Optional[FragmentHandler] = None,
    ) -> AnalysisResult:
        """
        Fetch fresh accounts from a data source, then analyze them.

        A data source failure becomes a failed result rather than an exception.
        """
        try:
            accounts = await source.fetch_accounts()
        except CrmAPIError as e:
            logger.error("Account fetch failed: %s", e)
            return AnalysisResult(
                insight=format_error_report(str(e)),
                status=AnalysisStatus.FAILED,
                error=str(e),
            )
        return await self.analyze(accounts, criteria, question, on_fragment)

    async def _collect_insight(
        self, context: str, question: str, on_fragment: Optional[FragmentHandler]
    ) -> str:
        """Consume the insight stream to completion."""
        fragments = []
        async for fragment in self.insight_generator.generate_insights(context, question):
            fragments.append(fragment)
            if on_fragment:
                on_fragment(fragment)
        return "".join(fragments)
