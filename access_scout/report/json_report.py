# access_scout/report/json_report.py

"""
Сохранение результата анализа AccessScout в JSON-файл.

Внешние генераторы отчётов (текст, CSV) читают этот JSON; имена полей и
порядок проблем и худших страниц стабильны.
"""
import json
from pathlib import Path

from access_scout.engine import AnalysisResult


def render_json(result: AnalysisResult, output_path: Path | str, *, pretty: bool = True) -> Path:
    """
    Сохраняет результат анализа в формате JSON по указанному пути.

    :param result: объект AnalysisResult
    :param output_path: путь к JSON-файлу
    :param pretty: отступ 2 пробела
    :return: Path сохранённого файла

    Пример:
    ```python
    from access_scout.report.json_report import render_json
    report_path = render_json(result, 'reports/example.json')
    print(f"JSON report saved to: {report_path}")
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open('w', encoding='utf-8') as f:
        json.dump(result.to_dict(), f, ensure_ascii=False, indent=2 if pretty else None)

    return output
