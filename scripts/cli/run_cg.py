#!/usr/bin/env python3
"""
run_cg.py

Riemannian conjugate gradient driven by a YAML config

Usage examples:
  # Smallest eigenvector via the Rayleigh quotient on the sphere:
  python run_cg.py configs/rayleigh_sphere.yaml -v

  # Same problem, Polak–Ribière with restarts, save the minimizer:
  python run_cg.py configs/rayleigh_sphere.yaml --scheme PR+ --export-npy x.npy
"""

import argparse
import dataclasses
from pathlib import Path

import numpy as np

from geocg.model.cg import CGModel


def parse_args():
    p = argparse.ArgumentParser(description="Riemannian CG from a YAML config")
    p.add_argument("config", type=Path, help="Path to the YAML run config")
    p.add_argument(
        "--max-steps", type=int, default=None, help="Override the CG step cap"
    )
    p.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Override the seed of the random initial point",
    )
    p.add_argument(
        "--scheme",
        type=str,
        default=None,
        help="Override the beta scheme (e.g. HS, FR, PR, CD, DY; '+' for restarts)",
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Print cost and step size after every CG iteration",
    )
    p.add_argument(
        "--input",
        "-i",
        type=str,
        default=None,
        help="Path to an initial point .npy file; if omitted, a random point is drawn",
    )
    p.add_argument(
        "--export-npy",
        type=str,
        default=None,
        help="If set, save the final point to this .npy file",
    )
    return p.parse_args()


def main():
    args = parse_args()

    model = CGModel.from_config(args.config)
    overrides = {
        "max_steps": args.max_steps,
        "seed": args.seed,
        "scheme": args.scheme,
        "log_every": 1 if args.verbose else None,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if overrides:
        model = dataclasses.replace(model, **overrides)

    initial = np.load(args.input) if args.input else None
    result = model.run(initial)

    print(
        f"[CG {result.extras['scheme']}] time={result.wall_time_s:.2f}s  |  "
        f"steps = {result.steps}  |  cost = {result.cost:.10e}  |  "
        f"evals = {result.extras['cost_evals']}/{result.extras['grad_evals']}"
    )

    if args.export_npy:
        np.save(args.export_npy, result.point)
        print(f"Saved point as .npy → {args.export_npy}")


if __name__ == "__main__":
    main()
