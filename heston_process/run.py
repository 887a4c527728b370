#!/usr/bin/env python3
"""
═══════════════════════════════════════════════════════════════════════════════
HESTON PROCESS - Command Line Entry Point
═══════════════════════════════════════════════════════════════════════════════

Usage:
    python -m heston_process.run --demo                   # One step, all schemes
    python -m heston_process.run --demo --dt 0.25 --dw0 1.5 --dw1 -2.0
    python -m heston_process.run --demo --mode reflection --v -0.01
    python -m heston_process.run --test                   # Validation suite

Parameters (defaults):
    κ (kappa)  = 1.0   - Mean reversion speed
    θ (theta)  = 0.04  - Long-term variance
    σ (sigma)  = 0.4   - Volatility of variance (vol of vol)
    ρ (rho)    = -0.5  - Correlation between S and V
    r, q       = 0.0   - Flat continuously-compounded rates

═══════════════════════════════════════════════════════════════════════════════
"""

import sys
import argparse
import datetime as dt


def run_demo(args):
    """Evolve one step from (S₀, V) under each requested scheme."""

    from heston_process.backend.core.parameters import DiscretizationMode, get_default_params
    from heston_process.backend.core.market import FlatForward, SimpleQuote
    from heston_process.backend.processes.heston import HestonProcess

    print("=" * 70)
    print("HESTON PROCESS - DEMO")
    print("=" * 70)
    print()

    params = get_default_params()
    today = dt.date.today()
    risk_free = FlatForward(today, args.r)
    dividend = FlatForward(today, args.q)
    spot = SimpleQuote(args.spot)

    print("Heston Parameters:")
    print(f"  κ (kappa)  = {params.kappa}")
    print(f"  θ (theta)  = {params.theta}")
    print(f"  σ (sigma)  = {params.sigma}")
    print(f"  ρ (rho)    = {params.rho}")
    print(f"  V₀         = {params.v0}")
    print(f"  r, q       = {args.r}, {args.q}")
    print(f"  Feller     = {params.feller_ratio:.2f} {'✓' if params.feller_satisfied else '✗'}")
    print()

    variance = params.v0 if args.v is None else args.v
    x0 = [args.spot, variance]
    dw = [args.dw0, args.dw1]

    print(f"Step: t₀=0, Δt={args.dt}, x₀=(S={args.spot}, V={variance}), "
          f"dw=({args.dw0}, {args.dw1})")
    print("-" * 70)
    print(f"   {'Scheme':<20} {'S₁':>14} {'V₁':>14}")

    modes = list(DiscretizationMode) if args.mode is None \
        else [DiscretizationMode.parse(args.mode)]
    for mode in modes:
        process = HestonProcess.from_params(
            risk_free, dividend, spot, params.with_discretization(mode))
        s1, v1 = process.evolve(0.0, x0, args.dt, dw)
        print(f"   {mode.value:<20} {s1:14.6f} {v1:14.8f}")

    print()
    print("=" * 70)
    print("Demo complete!")
    print("=" * 70)


def run_tests():
    """Run validation tests."""
    from heston_process.tests.validation import run_all_tests
    success = run_all_tests()
    return 0 if success else 1


def main():
    parser = argparse.ArgumentParser(
        description='Heston Stochastic Volatility Process',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m heston_process.run --demo             One step under every scheme
    python -m heston_process.run --demo --dt 0.5    Half-year step
    python -m heston_process.run --test             Run validation tests
        """
    )

    parser.add_argument('--test', action='store_true', help='Run validation tests')
    parser.add_argument('--demo', action='store_true', help='Run demo step')
    parser.add_argument('--mode', default=None,
                        help='Discretization (partial_truncation, full_truncation, '
                             'reflection, exact_variance); default: all')
    parser.add_argument('--spot', type=float, default=100.0, help='Spot S₀ (default: 100)')
    parser.add_argument('--v', type=float, default=None, help='Starting variance (default: V₀)')
    parser.add_argument('--dt', type=float, default=1.0, help='Step length in years (default: 1.0)')
    parser.add_argument('--dw0', type=float, default=0.0, help='Asset shock (default: 0)')
    parser.add_argument('--dw1', type=float, default=0.0, help='Variance shock (default: 0)')
    parser.add_argument('--r', type=float, default=0.0, help='Risk-free rate (default: 0)')
    parser.add_argument('--q', type=float, default=0.0, help='Dividend yield (default: 0)')

    args = parser.parse_args()

    if args.test:
        sys.exit(run_tests())
    elif args.demo:
        run_demo(args)
    else:
        parser.print_help()


if __name__ == '__main__':
    main()
