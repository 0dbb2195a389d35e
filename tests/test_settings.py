"""
Tests for environment parsing helpers.
"""

import pytest

from config.settings import parse_asset_symbols


class TestParseAssetSymbols:
    def test_pairs(self):
        assert parse_asset_symbols("1:USDT, 2:DOT") == {1: "USDT", 2: "DOT"}

    def test_blank(self):
        assert parse_asset_symbols("") == {}
        assert parse_asset_symbols(" , ") == {}

    def test_entry_without_symbol(self):
        with pytest.raises(ValueError):
            parse_asset_symbols("1:USDT,2")
