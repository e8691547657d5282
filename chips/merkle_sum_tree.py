"""Merkle sum tree chip: per-level inclusion gate and solvency bound.

One "merkle prove layer" region per tree level (columns a..e, q_layer on row 0):

    row 0: a = hash       b = sum       c = sibling_hash  d = sibling_sum  e = path_bit
    row 1: a = left_hash  b = left_sum  c = right_hash    d = right_sum    e = next_sum

    bool constraint:  bit * (1 - bit)
    swap constraint:  left_hash  = hash + bit * (sibling_hash - hash)
                      right_hash = sibling_hash + bit * (hash - sibling_hash)
                      left_sum   = sum + bit * (sibling_sum - sum)
                      right_sum  = sibling_sum + bit * (sum - sibling_sum)
    sum constraint:   next_sum = left_sum + right_sum

The next hash is the output of the injected hash chip over (left_hash,
right_hash), copied in from row 1. Witness values are computed with the same
mux identities, so the layout does not depend on the path bits.

The "enforce sum to be less than total assets" region holds the final sum (a),
the public assets sum copied from the instance column (b) and the comparator
witness; its gate forces the comparator's is_lt to be 1.
"""

from dataclasses import dataclass
from typing import Any, Tuple, Type

from primitives.field import FF
from primitives.merkle_sum_tree import ProofStep
from protocol.constraint_system import Column, ConstraintSystem, Selector
from protocol.layouter import AssignedCell, Layouter, Region
from .base import HashInstructions, LessThanInstructions

N_ADVICE = 5

LEAF_HASH_ROW = 0
LEAF_BALANCE_ROW = 1
ROOT_HASH_ROW = 2
ASSETS_SUM_ROW = 3


@dataclass(frozen=True)
class MerkleSumTreeChipConfig:
    advice: Tuple[Column, ...]
    instance: Column
    q_layer: Selector
    q_enforce_lt: Selector
    hash_chip: Type[HashInstructions]
    hash_config: Any
    lt_chip: Type[LessThanInstructions]
    lt_config: Any


class MerkleSumTreeChip:
    """Gates and assignment helpers for the Merkle sum tree circuit."""

    def __init__(self, config: MerkleSumTreeChipConfig):
        self.config = config
        self.hasher = config.hash_chip(config.hash_config)
        self.comparator = config.lt_chip(config.lt_config)

    @classmethod
    def configure(
        cls,
        cs: ConstraintSystem,
        advice: Tuple[Column, ...],
        instance: Column,
        hash_chip: Type[HashInstructions],
        lt_chip: Type[LessThanInstructions],
        n_bytes: int,
    ) -> MerkleSumTreeChipConfig:
        if len(advice) != N_ADVICE:
            raise ValueError(f"MerkleSumTreeChip needs {N_ADVICE} advice columns, got {len(advice)}")
        col_a, col_b, col_c, col_d, col_e = advice
        q_layer = cs.selector()
        q_enforce_lt = cs.selector()

        def bool_constraint(ctx):
            q = ctx.selector(q_layer)
            bit = ctx.col(col_e)
            return [q * bit * (FF(1) - bit)]

        def swap_constraint(ctx):
            q = ctx.selector(q_layer)
            bit = ctx.col(col_e)
            hash_cur, sibling_hash = ctx.col(col_a), ctx.col(col_c)
            sum_cur, sibling_sum = ctx.col(col_b), ctx.col(col_d)
            return [
                q * (ctx.next_col(col_a) - (hash_cur + bit * (sibling_hash - hash_cur))),
                q * (ctx.next_col(col_c) - (sibling_hash + bit * (hash_cur - sibling_hash))),
                q * (ctx.next_col(col_b) - (sum_cur + bit * (sibling_sum - sum_cur))),
                q * (ctx.next_col(col_d) - (sibling_sum + bit * (sum_cur - sibling_sum))),
            ]

        def sum_constraint(ctx):
            q = ctx.selector(q_layer)
            return [q * (ctx.next_col(col_e) - (ctx.next_col(col_b) + ctx.next_col(col_d)))]

        cs.create_gate("bool constraint", bool_constraint)
        cs.create_gate(
            "swap constraint",
            swap_constraint,
            ["left hash", "right hash", "left sum", "right sum"],
        )
        cs.create_gate("sum constraint", sum_constraint)

        hash_config = hash_chip.configure(cs, advice)
        lt_config = lt_chip.configure(
            cs,
            q_enforce_lt,
            lambda ctx: ctx.col(col_a),
            lambda ctx: ctx.col(col_b),
            n_bytes,
        )

        def enforce_lt(ctx):
            return [ctx.selector(q_enforce_lt) * (FF(1) - ctx.col(lt_config.lt))]

        cs.create_gate("is_lt from LtChip must equal one", enforce_lt)

        return MerkleSumTreeChipConfig(
            advice=advice,
            instance=instance,
            q_layer=q_layer,
            q_enforce_lt=q_enforce_lt,
            hash_chip=hash_chip,
            hash_config=hash_config,
            lt_chip=lt_chip,
            lt_config=lt_config,
        )

    # --- Assignment ---

    def assign_leaf_hash_and_balance(
        self, layouter: Layouter, leaf_hash: int, leaf_balance: int
    ) -> Tuple[AssignedCell, AssignedCell]:
        col_a, col_b = self.config.advice[0], self.config.advice[1]

        def assign(region: Region) -> Tuple[AssignedCell, AssignedCell]:
            return (
                region.assign_advice("leaf hash", col_a, 0, leaf_hash),
                region.assign_advice("leaf balance", col_b, 0, leaf_balance),
            )

        return layouter.assign_region("assign leaf", assign)

    def merkle_prove_layer(
        self, layouter: Layouter, node_hash: AssignedCell, node_sum: AssignedCell, step: ProofStep
    ) -> Tuple[AssignedCell, AssignedCell]:
        """Apply one level: returns the (hash, sum) cells of the parent node."""
        col_a, col_b, col_c, col_d, col_e = self.config.advice

        def assign(region: Region) -> Tuple[AssignedCell, AssignedCell, AssignedCell]:
            region.enable_selector(self.config.q_layer, 0)

            h = node_hash.copy_advice("hash", region, col_a, 0)
            s = node_sum.copy_advice("sum", region, col_b, 0)
            sibling_hash = region.assign_advice("sibling hash", col_c, 0, step.sibling_hash).value
            sibling_sum = region.assign_advice("sibling sum", col_d, 0, step.sibling_sum).value
            bit = region.assign_advice("path bit", col_e, 0, step.path_bit).value

            # Mux without branching on the bit
            left_hash = h.value + bit * (sibling_hash - h.value)
            right_hash = sibling_hash + bit * (h.value - sibling_hash)
            left_sum = s.value + bit * (sibling_sum - s.value)
            right_sum = sibling_sum + bit * (s.value - sibling_sum)

            left_hash_cell = region.assign_advice("left hash", col_a, 1, left_hash)
            region.assign_advice("left sum", col_b, 1, left_sum)
            right_hash_cell = region.assign_advice("right hash", col_c, 1, right_hash)
            region.assign_advice("right sum", col_d, 1, right_sum)
            next_sum = region.assign_advice("next sum", col_e, 1, left_sum + right_sum)
            return left_hash_cell, right_hash_cell, next_sum

        left_hash_cell, right_hash_cell, next_sum = layouter.assign_region("merkle prove layer", assign)
        next_hash = self.hasher.hash_two(layouter, left_hash_cell, right_hash_cell)
        return next_hash, next_sum

    def enforce_less_than(self, layouter: Layouter, total_sum: AssignedCell) -> AssignedCell:
        """Constrain total_sum < assets sum (instance row ASSETS_SUM_ROW); returns the is_lt cell."""
        col_a, col_b = self.config.advice[0], self.config.advice[1]

        def assign(region: Region) -> AssignedCell:
            region.enable_selector(self.config.q_enforce_lt, 0)
            lhs = total_sum.copy_advice("total sum", region, col_a, 0)
            rhs = region.assign_advice_from_instance(
                "assets sum", self.config.instance, ASSETS_SUM_ROW, col_b, 0
            )
            return self.comparator.assign(region, 0, lhs.value, rhs.value)

        self.comparator.load(layouter)
        return layouter.assign_region("enforce sum to be less than total assets", assign)

    def expose_public(self, layouter: Layouter, cell: AssignedCell, row: int) -> None:
        layouter.constrain_instance(cell, self.config.instance, row)

