from __future__ import annotations

import asyncio
from typing import Any, List, Sequence

from core.domain.entities.block_entity import BlockHeader, RawEvent
from core.domain.entities.currency_entity import Currency, is_pooled_token
from core.domain.entities.decoded_event_entity import AssetSwapDecoded, StableExchangeDecoded
from core.domain.entities.dex_entity import PooledAmount, SwapDetails, SwapLeg
from core.domain.enums.market_enums import PoolType
from core.domain.exceptions import (
    AssetIndexOutOfRange,
    PoolNotFound,
    StorageVersionUnsupported,
    SwapAmountsMismatch,
    UnexpectedCurrencyType,
)
from core.services.cumulative_volume_service import PoolVolumeDelta
from core.services.currency_order_service import CurrencyOrderService
from core.services.swap_fee_service import SwapFeeService
from core.usecases.base_event_use_case import EventUseCase


def create_swap_legs(
    currencies: Sequence[Currency],
    raw_currency_ids: Sequence[Any],
    atomic_balances: Sequence[int],
    *,
    account_id: str,
    recipient: str,
) -> List[SwapLeg]:
    """
    Zip a swap path with its balances, in path order.

    The last leg belongs to the recipient; every other leg to the swapping account.

    Raises:
        SwapAmountsMismatch: currency count differs from balance count.
        UnexpectedCurrencyType: a currency in the path cannot be pooled.
    """
    if len(currencies) != len(atomic_balances) or len(currencies) != len(raw_currency_ids):
        raise SwapAmountsMismatch(
            f"Cannot create swap legs; currency count [{len(currencies)}] does not match "
            f"balance count [{len(atomic_balances)}]"
        )

    legs: List[SwapLeg] = []
    last = len(currencies) - 1
    for idx, (currency, raw, amount) in enumerate(zip(currencies, raw_currency_ids, atomic_balances)):
        if not is_pooled_token(currency):
            raise UnexpectedCurrencyType(f"Unexpected currency type {currency.kind} in swap path")
        legs.append(
            SwapLeg(
                currency=currency,
                atomic_amount=int(amount),
                account_id=recipient if idx == last else account_id,
                raw_currency_id=raw,
            )
        )
    return legs


def pairwise_swap_details(legs: Sequence[SwapLeg]) -> List[SwapDetails]:
    """
    Consecutive legs as (from, to) hops.
    """
    return [SwapDetails(from_leg=legs[idx], to_leg=legs[idx + 1]) for idx in range(len(legs) - 1)]


class DexSwapUseCase(EventUseCase):
    """
    Folds standard (multi-hop) swaps and stable pool exchanges into Swap
    records and the cumulative volume / trade count aggregates.
    """

    async def asset_swap(self, event: RawEvent, block: BlockHeader) -> bool:
        decoded: AssetSwapDecoded | None = self._decode(event)
        if decoded is None:
            return False

        try:
            legs = create_swap_legs(
                decoded.path,
                decoded.raw_path,
                decoded.balances,
                account_id=decoded.account_id,
                recipient=decoded.recipient,
            )
        except UnexpectedCurrencyType as exc:
            self._logger.error("%s, skip processing of %s id=%s", exc, event.name, event.id)
            return False

        hops = pairwise_swap_details(legs)

        # independent lookups; combined below in hop order
        height, *fee_rates = await asyncio.gather(
            self._session.heights.resolve(block.height),
            *(self._session.fees.standard_fee_rate(hop, block) for hop in hops),
        )

        pool_deltas: List[PoolVolumeDelta] = []
        fee_amounts: List[PooledAmount] = []
        for idx, (hop, fee_rate) in enumerate(zip(hops, fee_rates)):
            pool_id = CurrencyOrderService.infer_pool_id(hop.from_leg.currency, hop.to_leg.currency)
            swap = SwapFeeService.build_swap(
                swap_id=f"{event.id}-{idx}",
                details=hop,
                pool_type=PoolType.STANDARD,
                pool_id=pool_id,
                fee_rate=fee_rate,
                height=height,
                timestamp=block.timestamp,
            )
            self._session.buffer.push_entity(swap)
            fee_amounts.append(swap.fees)
            pool_deltas.append(
                PoolVolumeDelta(
                    pool_type=PoolType.STANDARD,
                    pool_id=pool_id,
                    amounts=[swap.from_amount, swap.to_amount],
                    fees=[swap.fees],
                )
            )

        await self._session.volumes.fold_swap(
            account_id=decoded.account_id,
            till_timestamp=block.timestamp,
            pool_deltas=pool_deltas,
            amounts=[PooledAmount(token=leg.currency, amount=leg.atomic_amount) for leg in legs],
            fees=fee_amounts,
        )
        return True

    async def stable_exchange(self, event: RawEvent, block: BlockHeader) -> bool:
        decoded: StableExchangeDecoded | None = self._decode(event)
        if decoded is None:
            return False

        pools = self._session.pool_cache
        try:
            out_member = await pools.get_currency_by_index(pool_id=decoded.pool_id, index=decoded.out_index, block=block)
            in_member = await pools.get_currency_by_index(pool_id=decoded.pool_id, index=decoded.in_index, block=block)
        except (PoolNotFound, AssetIndexOutOfRange, StorageVersionUnsupported) as exc:
            self._logger.warning("%s; skip processing of %s id=%s", exc, event.name, event.id)
            return False

        for label, member in (("currencyIn", in_member), ("currencyOut", out_member)):
            if not is_pooled_token(member.currency):
                self._logger.error(
                    "Unexpected %s type %s, skip processing of %s id=%s",
                    label,
                    member.currency.kind,
                    event.name,
                    event.id,
                )
                return False

        hop = SwapDetails(
            from_leg=SwapLeg(
                currency=in_member.currency,
                atomic_amount=decoded.in_amount,
                account_id=decoded.account_id,
                raw_currency_id=in_member.raw_currency_id,
            ),
            to_leg=SwapLeg(
                currency=out_member.currency,
                atomic_amount=decoded.out_amount,
                account_id=decoded.account_id,
                raw_currency_id=out_member.raw_currency_id,
            ),
        )

        height, fee_rate = await asyncio.gather(
            self._session.heights.resolve(block.height),
            self._session.fees.stable_fee_rate(decoded.pool_id, block),
        )

        pool_id = str(decoded.pool_id)
        swap = SwapFeeService.build_swap(
            swap_id=f"{event.id}-0",
            details=hop,
            pool_type=PoolType.STABLE,
            pool_id=pool_id,
            fee_rate=fee_rate,
            height=height,
            timestamp=block.timestamp,
        )
        self._session.buffer.push_entity(swap)

        await self._session.volumes.fold_swap(
            account_id=decoded.account_id,
            till_timestamp=block.timestamp,
            pool_deltas=[
                PoolVolumeDelta(
                    pool_type=PoolType.STABLE,
                    pool_id=pool_id,
                    amounts=[swap.from_amount, swap.to_amount],
                    fees=[swap.fees],
                )
            ],
            amounts=[swap.from_amount, swap.to_amount],
            fees=[swap.fees],
        )
        return True
