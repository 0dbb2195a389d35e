from __future__ import annotations

import asyncio
from typing import Optional

from core.domain.entities.block_entity import BlockHeader, RawEvent
from core.domain.entities.currency_entity import Currency, LendToken
from core.domain.entities.decoded_event_entity import InterestAccruedDecoded, LoanAmountDecoded
from core.domain.entities.loan_entity import Deposit, InterestAccrual, Loan
from core.services.currency_codec_service import CurrencyCodecService, short_account
from core.usecases.base_event_use_case import EventUseCase

# Loans exchange rates are 18-decimal fixed point
EXCHANGE_RATE_SCALE = 10**18


class LoanActivityUseCase(EventUseCase):
    """
    Emits Loan, Deposit and InterestAccrual records for account-level Loans events.
    """

    async def borrowed(self, event: RawEvent, block: BlockHeader) -> bool:
        decoded: LoanAmountDecoded | None = self._decode(event)
        if decoded is None:
            return False

        height = await self._session.heights.resolve(block.height)
        friendly = CurrencyCodecService.friendly_amount(decoded.currency, decoded.amount)
        self._session.buffer.push_entity(
            Loan(
                id=event.id,
                height=height,
                timestamp=int(block.timestamp),
                user_parachain_address=decoded.account_id,
                token=decoded.currency,
                amount_borrowed=decoded.amount,
                comment=f"{short_account(decoded.account_id)} borrowed {friendly}",
            )
        )
        return True

    async def repaid(self, event: RawEvent, block: BlockHeader) -> bool:
        decoded: LoanAmountDecoded | None = self._decode(event)
        if decoded is None:
            return False

        height = await self._session.heights.resolve(block.height)
        friendly = CurrencyCodecService.friendly_amount(decoded.currency, decoded.amount)
        self._session.buffer.push_entity(
            Loan(
                id=event.id,
                height=height,
                timestamp=int(block.timestamp),
                user_parachain_address=decoded.account_id,
                token=decoded.currency,
                amount_repaid=decoded.amount,
                comment=f"{short_account(decoded.account_id)} paid back {friendly}",
            )
        )
        return True

    async def deposited(self, event: RawEvent, block: BlockHeader) -> bool:
        decoded: LoanAmountDecoded | None = self._decode(event)
        if decoded is None:
            return False

        height = await self._session.heights.resolve(block.height)
        friendly = CurrencyCodecService.friendly_amount(decoded.currency, decoded.amount)
        self._session.buffer.push_entity(
            Deposit(
                id=event.id,
                height=height,
                timestamp=int(block.timestamp),
                user_parachain_address=decoded.account_id,
                token=decoded.currency,
                amount_deposited=decoded.amount,
                comment=f"{short_account(decoded.account_id)} deposited {friendly} for lending",
            )
        )
        return True

    async def redeemed(self, event: RawEvent, block: BlockHeader) -> bool:
        """
        Redeem: a deposit withdrawn by returning lend tokens for the underlying.
        """
        decoded: LoanAmountDecoded | None = self._decode(event)
        if decoded is None:
            return False

        height = await self._session.heights.resolve(block.height)
        friendly = CurrencyCodecService.friendly_amount(decoded.currency, decoded.amount)
        self._session.buffer.push_entity(
            Deposit(
                id=event.id,
                height=height,
                timestamp=int(block.timestamp),
                user_parachain_address=decoded.account_id,
                token=decoded.currency,
                amount_withdrawn=decoded.amount,
                comment=f"{short_account(decoded.account_id)} withdrew {friendly} from deposit",
            )
        )
        return True

    async def _collateral_amount_text(self, currency: Currency, amount: int, block: BlockHeader) -> str:
        """
        Human amount of a collateral movement, in underlying terms for lend tokens.
        """
        if not isinstance(currency, LendToken):
            return CurrencyCodecService.friendly_amount(currency, amount)

        underlying: Optional[Currency] = await self._session.markets.underlying_for_lend_token(currency.lend_token_id)
        if underlying is None:
            return CurrencyCodecService.friendly_amount(currency, amount)

        symbol = CurrencyCodecService.symbol(underlying, self._session.foreign_asset_symbols)
        sample = self._session.exchange_rates.get_rate(block.height, symbol)
        self._logger.debug("%s blocks difference for %s", block.height - sample.height, sample.symbol)
        return CurrencyCodecService.friendly_amount(underlying, amount * sample.rate)

    async def deposit_collateral(self, event: RawEvent, block: BlockHeader) -> bool:
        decoded: LoanAmountDecoded | None = self._decode(event)
        if decoded is None:
            return False

        height, friendly = await asyncio.gather(
            self._session.heights.resolve(block.height),
            self._collateral_amount_text(decoded.currency, decoded.amount, block),
        )
        self._session.buffer.push_entity(
            Deposit(
                id=event.id,
                height=height,
                timestamp=int(block.timestamp),
                user_parachain_address=decoded.account_id,
                token=decoded.currency,
                amount_deposited=decoded.amount,
                comment=f"{short_account(decoded.account_id)} deposited {friendly} for collateral",
            )
        )
        return True

    async def withdraw_collateral(self, event: RawEvent, block: BlockHeader) -> bool:
        decoded: LoanAmountDecoded | None = self._decode(event)
        if decoded is None:
            return False

        height, friendly = await asyncio.gather(
            self._session.heights.resolve(block.height),
            self._collateral_amount_text(decoded.currency, decoded.amount, block),
        )
        self._session.buffer.push_entity(
            Deposit(
                id=event.id,
                height=height,
                timestamp=int(block.timestamp),
                user_parachain_address=decoded.account_id,
                token=decoded.currency,
                amount_withdrawn=decoded.amount,
                comment=f"{short_account(decoded.account_id)} withdrew {friendly} from collateral",
            )
        )
        return True

    async def interest_accrued(self, event: RawEvent, block: BlockHeader) -> bool:
        """
        Interest accrues whenever a loan is taken or repaid, moving the exchange rate.
        The new rate is appended to the session's rate cache under the underlying symbol.
        """
        decoded: InterestAccruedDecoded | None = self._decode(event)
        if decoded is None:
            return False

        rate = decoded.exchange_rate / EXCHANGE_RATE_SCALE
        symbol = CurrencyCodecService.symbol(decoded.underlying, self._session.foreign_asset_symbols)
        self._session.exchange_rates.add_rate(block.height, symbol, rate)

        height = await self._session.heights.resolve(block.height)
        self._session.buffer.push_entity(
            InterestAccrual(
                id=event.id,
                height=height,
                timestamp=int(block.timestamp),
                underlying_currency=decoded.underlying,
                currency_symbol=symbol,
                total_borrows=decoded.total_borrows,
                total_reserves=decoded.total_reserves,
                borrow_index=decoded.borrow_index,
                utilization_ratio=decoded.utilization_ratio,
                borrow_rate=decoded.borrow_rate,
                supply_rate=decoded.supply_rate,
                exchange_rate=decoded.exchange_rate,
                exchange_rate_float=rate,
                comment=f"Exchange rate for {symbol} now {rate}",
            )
        )
        return True
