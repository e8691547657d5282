#!/usr/bin/env python3
"""
Check a proof of solvency for one user of a ledger.

Builds the Merkle sum tree from a `username;balance` CSV, instantiates the
solvency circuit for the chosen user and runs the mock prover against the
public inputs [leaf_hash, leaf_balance, root_hash, assets_sum].

Usage:
    python prove_solvency.py \
        --csv <tests/test-data/entry_16.csv> \
        --assets-sum 556863 \
        [--user-index 0 | --username dxGaEAii] \
        [--params <params.json>] [--k 9]
"""

import argparse
import dataclasses
import sys
from pathlib import Path

from circuits import CircuitParams, MerkleSumTreeCircuit
from circuits.params import DEFAULT_N_BYTES
from primitives.merkle_sum_tree import MerkleSumTree


def build_circuit(args: argparse.Namespace) -> MerkleSumTreeCircuit:
    """Build the tree and the circuit instance described by the command line.

    Raises:
        ValueError: On a malformed ledger, params file or leaf index
        KeyError: If --username is not in the ledger
    """
    params = CircuitParams.from_json(args.params) if args.params else None
    n_bytes = params.n_bytes if params is not None else DEFAULT_N_BYTES

    print(f"Loading ledger from {args.csv}...")
    tree = MerkleSumTree.from_csv(args.csv, n_bytes=n_bytes)

    if params is None:
        params = CircuitParams(depth=tree.depth)
    if args.k is not None:
        params = dataclasses.replace(params, k=args.k)

    index = tree.index_of(args.username) if args.username is not None else args.user_index

    print(f"  Entries: {len(tree.entries)}")
    print(f"  Depth: {tree.depth}")
    print(f"  Total liabilities: {tree.total_liabilities}")

    return MerkleSumTreeCircuit.from_proof(tree.generate_proof(index), args.assets_sum, params=params)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description='Check a Merkle sum tree proof of solvency with the mock prover'
    )
    parser.add_argument(
        '--csv',
        type=Path,
        required=True,
        help='Path to the ledger CSV (username;balance)'
    )
    parser.add_argument(
        '--assets-sum',
        type=int,
        required=True,
        help='Publicly disclosed total assets'
    )
    user = parser.add_mutually_exclusive_group()
    user.add_argument(
        '--user-index',
        type=int,
        default=0,
        help='Ledger row of the user to prove (default: 0)'
    )
    user.add_argument(
        '--username',
        type=str,
        default=None,
        help='Username of the user to prove'
    )
    parser.add_argument(
        '--params',
        type=Path,
        default=None,
        help='Circuit parameters JSON (depth, n_bytes, k, hasher, comparator)'
    )
    parser.add_argument(
        '--k',
        type=int,
        default=None,
        help='log2 of the number of rows (overrides --params)'
    )

    args = parser.parse_args(argv)

    if not args.csv.exists():
        print(f"Error: Ledger file not found: {args.csv}", file=sys.stderr)
        return 1
    if args.params is not None and not args.params.exists():
        print(f"Error: Params file not found: {args.params}", file=sys.stderr)
        return 1

    try:
        circuit = build_circuit(args)
        print("Running mock prover...")
        prover = circuit.mock_prove()
        failures = prover.verify()
    except (ValueError, KeyError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print("\nPublic inputs:")
    print(f"  Leaf hash: {hex(circuit.leaf_hash)}")
    print(f"  Leaf balance: {circuit.leaf_balance}")
    print(f"  Root hash: {hex(circuit.root_hash)}")
    print(f"  Assets sum: {circuit.assets_sum}")
    print(f"\nRows used: {prover.rows_used} of {prover.n}")

    if failures:
        print(f"\nFAILED ({len(failures)} failures):")
        for failure in failures:
            print(f"  {failure}")
        return 1

    print("\nOK")
    return 0


if __name__ == '__main__':
    sys.exit(main())
