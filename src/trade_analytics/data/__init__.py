"""Trade and portfolio file loading."""

from .loader import load_portfolio, load_trades, parse_trades

__all__ = ["load_portfolio", "load_trades", "parse_trades"]
