"""StockDash backend: market data, DEMA and support/resistance for the dashboard."""

__version__ = "0.1.0"
