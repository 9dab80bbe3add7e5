"""
Crypto Price Aggregator Service
Merges DexScreener, CoinGecko and CryptoCompare market data into a single record.
"""

__version__ = "1.0.0"
__author__ = "Crypto Price Aggregator Team"
__description__ = "Concurrent fan-out price aggregation over three public market data APIs"
