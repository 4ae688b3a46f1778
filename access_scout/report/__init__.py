"""access_scout.report: Сохранение результатов анализа для CLI и внешних генераторов отчётов."""

from access_scout.report.json_report import render_json

__all__ = ["render_json"]
