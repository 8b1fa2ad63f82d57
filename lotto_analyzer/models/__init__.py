"""Domain records."""

from lotto_analyzer.models.draw import DataSet, Draw
from lotto_analyzer.models.partition import COLUMNS, RANGES

__all__ = ["COLUMNS", "DataSet", "Draw", "RANGES"]
