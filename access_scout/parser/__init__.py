"""access_scout.parser: Эвристики доступности для одной HTML-страницы."""

from access_scout.parser.html_parser import PageFacts, analyze_html

__all__ = ["PageFacts", "analyze_html"]
