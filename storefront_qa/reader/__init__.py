from .page_reader import PageStateReader
from .price import extract_money, parse_price
from .sources import BlocksStateSource, ClassicStateSource, StateSource, detect_source

__all__ = [
    "PageStateReader",
    "StateSource",
    "ClassicStateSource",
    "BlocksStateSource",
    "detect_source",
    "parse_price",
    "extract_money",
]
