"""CRM Insights - strategic Q&A and sentiment analysis over CRM activity."""

__version__ = "1.0.0"
