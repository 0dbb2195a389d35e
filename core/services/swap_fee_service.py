from __future__ import annotations

import logging
from decimal import ROUND_DOWN, Decimal, localcontext

from core.domain.entities.block_entity import BlockHeader, Height
from core.domain.entities.dex_entity import PooledAmount, Swap, SwapDetails
from core.domain.enums.market_enums import PoolType
from core.repositories.chain_state_repository import ChainStateRepository
from core.services.currency_order_service import CurrencyOrderService
from core.services.pool_cache_service import StablePoolCache
from core.services.storage_decoder_service import PAIR_STATUSES, TRADING, storage_decoders

# Pair fee rates are stored in basis points
BASIS_POINT = Decimal("0.0001")

# Enough digits for u128 amounts times a fractional rate
_FEE_PRECISION = 80


def fee_amount(fee_rate: Decimal, atomic_amount: int) -> int:
    """
    floor(fee_rate * atomic_amount); fees never round up.
    """
    with localcontext() as ctx:
        ctx.prec = _FEE_PRECISION
        fee = (Decimal(fee_rate) * Decimal(int(atomic_amount))).to_integral_value(rounding=ROUND_DOWN)
    return int(fee)


class SwapFeeService:
    """
    Reads the fee rate a swap paid and builds Swap records with their fee leg.

    Standard pools: the pair's Trading status (basis points); zero while the
    pair is bootstrapping, disabled or unknown.
    Stable pools: the pool definition's fee.
    """

    def __init__(
        self,
        *,
        chain_state: ChainStateRepository,
        pool_cache: StablePoolCache,
        logger: logging.Logger | None = None,
    ) -> None:
        self._chain_state = chain_state
        self._pool_cache = pool_cache
        self._logger = logger or logging.getLogger(self.__class__.__name__)

    async def standard_fee_rate(self, details: SwapDetails, block: BlockHeader) -> Decimal:
        from_leg, to_leg = details.from_leg, details.to_leg
        if CurrencyOrderService.compare(from_leg.currency, to_leg.currency) < 0:
            pair_key = [from_leg.raw_currency_id, to_leg.raw_currency_id]
        else:
            pair_key = [to_leg.raw_currency_id, from_leg.raw_currency_id]

        snapshot = await self._chain_state.get_storage(name=PAIR_STATUSES, key=pair_key, block=block)
        if not snapshot.is_defined:
            self._logger.warning(
                "%s storage is not defined for spec_version=%s; using zero fee", PAIR_STATUSES, snapshot.spec_version
            )
            return Decimal(0)
        if snapshot.value is None:
            return Decimal(0)

        status = storage_decoders.decode(PAIR_STATUSES, snapshot.spec_version, snapshot.value)
        if status is None or status.kind != TRADING or status.fee_rate is None:
            return Decimal(0)
        return Decimal(status.fee_rate) * BASIS_POINT

    async def stable_fee_rate(self, pool_id: int, block: BlockHeader) -> Decimal:
        pool = await self._pool_cache.get_pool(pool_id=pool_id, block=block)
        return pool.fee_rate

    @staticmethod
    def fee_leg(details: SwapDetails, fee_rate: Decimal) -> PooledAmount:
        """
        Fee charged on the input side of a swap.
        """
        return PooledAmount(
            token=details.from_leg.currency,
            amount=fee_amount(fee_rate, details.from_leg.atomic_amount),
        )

    @staticmethod
    def build_swap(
        *,
        swap_id: str,
        details: SwapDetails,
        pool_type: PoolType,
        pool_id: str,
        fee_rate: Decimal,
        height: Height,
        timestamp: int,
    ) -> Swap:
        return Swap(
            id=swap_id,
            height=height,
            timestamp=int(timestamp),
            pool_type=pool_type,
            pool_id=pool_id,
            from_account=details.from_leg.account_id or "",
            to_account=details.to_leg.account_id or "",
            from_amount=PooledAmount(token=details.from_leg.currency, amount=details.from_leg.atomic_amount),
            to_amount=PooledAmount(token=details.to_leg.currency, amount=details.to_leg.atomic_amount),
            fees=SwapFeeService.fee_leg(details, fee_rate),
            fee_rate=fee_rate,
        )
