"""Poseidon permutation as a sub-circuit.

Layout of one "permute state" region (WIDTH state columns, one row per state):

    row 0        : left, right, CAPACITY_TAG      (inputs, copied in)
    row r (r>0)  : state after round r - 1
    row N_ROUNDS : output; column 0 is the compressed hash

Gates (on row r, relating row r to row r + 1):
    full round:    next[i] = sum_j M[i][j] * (cur[j] + rc[j])^5
    partial round: next[i] = M[i][0] * (cur[0] + rc[0])^5 + sum_{j>0} M[i][j] * (cur[j] + rc[j])
    initial capacity: cur[2] = CAPACITY_TAG on row 0
"""

from dataclasses import dataclass
from typing import Sequence, Tuple

from primitives.field import FF
from primitives.poseidon import (
    CAPACITY_TAG,
    MDS,
    N_ROUNDS,
    ROUND_CONSTANTS,
    WIDTH,
    is_full_round,
    permutation_trace,
    poseidon_compress,
)
from protocol.constraint_system import Column, ConstraintSystem, Selector
from protocol.layouter import AssignedCell, Layouter, Region
from .base import HashInstructions


@dataclass(frozen=True)
class PoseidonConfig:
    state: Tuple[Column, ...]
    round_constants: Tuple[Column, ...]
    q_full: Selector
    q_partial: Selector
    q_init: Selector


class PoseidonChip(HashInstructions):
    """Width-3 Poseidon compression chip."""

    def __init__(self, config: PoseidonConfig):
        self.config = config

    @classmethod
    def configure(cls, cs: ConstraintSystem, advice: Sequence[Column]) -> PoseidonConfig:
        if len(advice) < WIDTH:
            raise ValueError(f"PoseidonChip needs {WIDTH} advice columns, got {len(advice)}")
        state = tuple(advice[:WIDTH])
        round_constants = tuple(cs.fixed_column() for _ in range(WIDTH))
        q_full = cs.selector()
        q_partial = cs.selector()
        q_init = cs.selector()
        mds = [[FF(m) for m in row] for row in MDS]

        def sbox_inputs(ctx):
            return [ctx.col(state[j]) + ctx.col(round_constants[j]) for j in range(WIDTH)]

        def full_round(ctx):
            q = ctx.selector(q_full)
            x = [xj ** 5 for xj in sbox_inputs(ctx)]
            constraints = []
            for i in range(WIDTH):
                mixed = mds[i][0] * x[0]
                for j in range(1, WIDTH):
                    mixed = mixed + mds[i][j] * x[j]
                constraints.append(q * (ctx.next_col(state[i]) - mixed))
            return constraints

        def partial_round(ctx):
            q = ctx.selector(q_partial)
            x = sbox_inputs(ctx)
            x[0] = x[0] ** 5
            constraints = []
            for i in range(WIDTH):
                mixed = mds[i][0] * x[0]
                for j in range(1, WIDTH):
                    mixed = mixed + mds[i][j] * x[j]
                constraints.append(q * (ctx.next_col(state[i]) - mixed))
            return constraints

        def initial_capacity(ctx):
            return [ctx.selector(q_init) * (ctx.col(state[WIDTH - 1]) - FF(CAPACITY_TAG))]

        lanes = [f"lane {i}" for i in range(WIDTH)]
        cs.create_gate("full round", full_round, lanes)
        cs.create_gate("partial round", partial_round, lanes)
        cs.create_gate("initial capacity", initial_capacity)

        return PoseidonConfig(state, round_constants, q_full, q_partial, q_init)

    @staticmethod
    def compress(left: int, right: int) -> int:
        return poseidon_compress(left, right)

    def hash_two(self, layouter: Layouter, left: AssignedCell, right: AssignedCell) -> AssignedCell:
        config = self.config

        def assign(region: Region) -> AssignedCell:
            left.copy_advice("left input", region, config.state[0], 0)
            right.copy_advice("right input", region, config.state[1], 0)
            region.assign_advice("capacity", config.state[2], 0, CAPACITY_TAG)
            region.enable_selector(config.q_init, 0)

            trace = permutation_trace([int(left.value), int(right.value), CAPACITY_TAG])

            for r in range(N_ROUNDS):
                region.enable_selector(config.q_full if is_full_round(r) else config.q_partial, r)
                for j in range(WIDTH):
                    region.assign_fixed(f"rc[{r}][{j}]", config.round_constants[j], r, ROUND_CONSTANTS[r][j])

            cells = []
            for r in range(1, N_ROUNDS + 1):
                cells = [
                    region.assign_advice(f"state[{r}][{j}]", config.state[j], r, trace[r][j])
                    for j in range(WIDTH)
                ]
            return cells[0]

        return layouter.assign_region("permute state", assign)
