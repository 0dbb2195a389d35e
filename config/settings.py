"""
Application configuration for dex-lending-indexer.

Centralizes environment variables using python-dotenv.

Note:
- Chain state, block delivery and height bookkeeping are external collaborators;
  only the Mongo sink and the engine's own policies are configured here.
"""

import os
from typing import Dict

from dotenv import load_dotenv

load_dotenv()


def parse_asset_symbols(raw: str) -> Dict[int, str]:
    """
    Parse `"1:USDT,2:DOT"` into `{1: "USDT", 2: "DOT"}`. Blank entries are ignored.
    """
    symbols: Dict[int, str] = {}
    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue
        asset_id, _, symbol = entry.partition(":")
        if not symbol.strip():
            raise ValueError(f"Invalid foreign asset symbol entry: {entry!r}")
        symbols[int(asset_id)] = symbol.strip()
    return symbols


class Settings:
    """
    Configuration settings for the dex-lending-indexer.
    """

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    APP_NAME: str = os.getenv("APP_NAME", "dex-lending-indexer")

    # Mongo
    MONGODB_URL: str = os.getenv("MONGODB_URL", "mongodb://mongo-indexer:27017")
    MONGODB_DB_NAME: str = os.getenv("MONGODB_DB_NAME", "dex_lending_indexer")

    # Rate returned by the exchange-rate cache before any InterestAccrued sample exists
    DEFAULT_EXCHANGE_RATE: float = float(os.getenv("DEFAULT_EXCHANGE_RATE", "0.02"))

    # When true, an event whose spec version has no decoding rule fails instead of being skipped
    STRICT_EVENT_VERSIONS: bool = os.getenv("STRICT_EVENT_VERSIONS", "false").lower() == "true"

    # Buffered records are flushed to Mongo every N blocks
    FLUSH_EVERY_BLOCKS: int = int(os.getenv("FLUSH_EVERY_BLOCKS", "50"))

    # Symbols of foreign assets, keyed by asset id: "1:USDT,2:DOT"
    FOREIGN_ASSET_SYMBOLS: Dict[int, str] = parse_asset_symbols(os.getenv("FOREIGN_ASSET_SYMBOLS", ""))


settings = Settings()
