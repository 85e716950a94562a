"""Trade journal: annotation and export.

Key components
--------------
update_trade_journal  Patch emotion / setup / grade / notes on one trade
TradeExporter         CSV/JSON trade export
export_filename       Dated export file name
"""

from .annotate import update_trade_journal
from .export import TradeExporter, export_filename

__all__ = [
    "update_trade_journal",
    "TradeExporter",
    "export_filename",
]
