"""access_scout.crawler: Приоритетный обход сайта в пределах бюджета времени."""
