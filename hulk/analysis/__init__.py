"""Natural-language analysis of finished load test reports."""

from .analyzer import ChatCompletionsAnalyzer, ReportAnalyzer, build_analyzer, build_messages

__all__ = ["ReportAnalyzer", "ChatCompletionsAnalyzer", "build_analyzer", "build_messages"]
