"""Byte-decomposition less-than comparator.

For operands lhs, rhs < 256^N (N = n_bytes) the chip witnesses

    lt   = 1 if lhs < rhs else 0
    diff = lhs - rhs + lt * 256^N     (as an integer, 0 <= diff < 256^N)

and constrains diff through its N little-endian bytes:

    lt bool:          q * lt * (1 - lt) = 0
    lt decomposition: q * (lhs - rhs - sum_i diff_i * 256^i + lt * 256^N) = 0
    byte lookups:     q * diff_i in the u8 table, for every i

Operands outside 256^N are a precondition violation: the decomposition gate
then cannot be satisfied by an honest witness, and its meaning is undefined.
"""

from dataclasses import dataclass
from typing import Callable, Tuple

from primitives.field import FF, decompose_bytes, field_to_int
from protocol.constraint_system import Column, ConstraintSystem, Selector
from protocol.layouter import AssignedCell, Layouter, Region, Table
from .base import LessThanInstructions


@dataclass(frozen=True)
class LtConfig:
    q_enable: Selector
    lt: Column
    diff: Tuple[Column, ...]
    u8: Column
    n_bytes: int

    @property
    def range(self) -> int:
        return 1 << (8 * self.n_bytes)


class LtChip(LessThanInstructions):
    """is_lt = [lhs < rhs] for operands of at most n_bytes bytes."""

    def __init__(self, config: LtConfig):
        self.config = config

    @classmethod
    def configure(
        cls,
        cs: ConstraintSystem,
        q_enable: Selector,
        lhs: Callable,
        rhs: Callable,
        n_bytes: int,
    ) -> LtConfig:
        if n_bytes < 1 or 8 * n_bytes >= 253:
            raise ValueError(f"n_bytes must be in [1, 31], got {n_bytes}")

        lt = cs.advice_column()
        diff = tuple(cs.advice_column() for _ in range(n_bytes))
        u8 = cs.lookup_table_column()
        range_ff = FF(1 << (8 * n_bytes))
        powers = [FF(1 << (8 * i)) for i in range(n_bytes)]

        def lt_bool(ctx):
            q = ctx.selector(q_enable)
            is_lt = ctx.col(lt)
            return [q * is_lt * (FF(1) - is_lt)]

        def lt_decomposition(ctx):
            q = ctx.selector(q_enable)
            diff_sum = powers[0] * ctx.col(diff[0])
            for i in range(1, n_bytes):
                diff_sum = diff_sum + powers[i] * ctx.col(diff[i])
            return [q * (lhs(ctx) - rhs(ctx) - diff_sum + ctx.col(lt) * range_ff)]

        cs.create_gate("lt bool", lt_bool)
        cs.create_gate("lt decomposition", lt_decomposition)
        for i in range(n_bytes):
            cs.lookup(
                f"diff byte {i} in u8 table",
                lambda ctx, i=i: [ctx.selector(q_enable) * ctx.col(diff[i])],
                [u8],
            )

        return LtConfig(q_enable, lt, diff, u8, n_bytes)

    def load(self, layouter: Layouter) -> None:
        def assign(table: Table) -> None:
            for value in range(256):
                table.assign_cell("u8", self.config.u8, value, value)

        layouter.assign_table("u8 range table", assign)

    def assign(self, region: Region, offset: int, lhs: FF, rhs: FF) -> AssignedCell:
        config = self.config
        lhs_int, rhs_int = field_to_int(lhs), field_to_int(rhs)
        is_lt = 1 if lhs_int < rhs_int else 0
        # Truncated to n_bytes so out-of-range operands fail the decomposition gate.
        diff = (lhs_int - rhs_int + is_lt * config.range) % config.range

        lt_cell = region.assign_advice("lt", config.lt, offset, is_lt)
        for i, byte in enumerate(decompose_bytes(diff, config.n_bytes)):
            region.assign_advice(f"diff byte {i}", config.diff[i], offset, byte)
        return lt_cell
