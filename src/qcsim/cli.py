"""
Command-line interface for qcsim.

Usage:
    qcsim bell --shots 1000
    qcsim grover 101 --shots 2048
    qcsim bench --qubits 4 8 12 16 --plot scaling.png
    qcsim gates
    qcsim --seed 7 -v bell
"""
import argparse
import logging
import sys

import numpy as np

logger = logging.getLogger(__name__)


def _print_counts(result):
    for key, m in sorted(result.measurements.items()):
        pct = 100 * (m.frequency if m.frequency is not None else m.probability)
        bar = '█' * int(pct / 2)
        print(f"  |{key}⟩: p={m.probability:.3f} ({pct:5.1f}%) {bar}")


def cmd_bell(args, rng):
    """Prepare and sample a Bell pair."""
    from .circuit import CircuitBuilder
    from .engine import run_circuit

    circuit = CircuitBuilder(2, "bell").h(0).cx(0, 1).measure_all().build()
    result = run_circuit(circuit, shots=args.shots, rng=rng)
    print(f"Bell state ({args.shots} shots, {result.execution_time:.2f} ms)")
    print(f"  state: {result.final_state.to_ket()}")
    _print_counts(result)


def cmd_grover(args, rng):
    """Run Grover search for a marked bit-string."""
    from .algorithms import search

    outcome = search(args.marked, iterations=args.iterations, shots=args.shots, rng=rng)
    print(outcome)
    _print_counts(outcome.result)


def cmd_bench(args, rng):
    """Time the engine across register widths."""
    from .benchmark import scaling_sweep, summary

    results = scaling_sweep(args.qubits, args.gates_per_qubit, args.repeats)
    print(summary(results))
    if args.plot:
        from .benchmark.plot import plot_scaling
        print(f"Plot saved to {plot_scaling(results, args.plot)}")


def cmd_gates(args, rng):
    """List the gate catalog."""
    from .gates import STANDARD_GATES

    for name, gate in STANDARD_GATES.items():
        print(f"  {gate.symbol:6s} {name:10s} {gate.qubits}q  {gate.description}")
    print(f"  parametrized: {', '.join(STANDARD_GATES.parametrized)}")


def cmd_info(args, rng):
    """Show qcsim information."""
    from . import __version__

    print(f"""
qcsim v{__version__}
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

Dense state-vector quantum circuit simulator.

  • Interleaved float64 state buffer, 16 bytes per amplitude
  • O(2^n · 2^k) gate application, no full-operator matrices
  • Projective measurement and multi-shot sampling
  • Process-pool worker for parallel circuits

Usage:
  qcsim bell --shots 1000
  qcsim grover 101
  qcsim bench --qubits 4 8 12 --plot scaling.png
""")


def build_parser():
    parser = argparse.ArgumentParser(
        prog='qcsim',
        description='State-vector quantum circuit simulator'
    )
    parser.add_argument('--seed', type=int, help='Seed for measurement randomness')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    parser.add_argument('-q', '--quiet', action='store_true', help='Errors only')
    subparsers = parser.add_subparsers(dest='command', help='Commands')

    bell_parser = subparsers.add_parser('bell', help='Sample a Bell pair')
    bell_parser.add_argument('--shots', type=int, default=1024, help='Number of shots')
    bell_parser.set_defaults(func=cmd_bell)

    grover_parser = subparsers.add_parser('grover', help='Grover search')
    grover_parser.add_argument('marked', help='Marked bit-string, qubit 0 rightmost')
    grover_parser.add_argument('--iterations', type=int,
                               help='Grover iterations (default: optimal)')
    grover_parser.add_argument('--shots', type=int, default=1024, help='Number of shots')
    grover_parser.set_defaults(func=cmd_grover)

    bench_parser = subparsers.add_parser('bench', help='Benchmark engine scaling')
    bench_parser.add_argument('--qubits', type=int, nargs='+', default=[2, 4, 8, 12],
                              help='Register widths to time')
    bench_parser.add_argument('--gates-per-qubit', type=int, default=2,
                              help='Gate budget per qubit')
    bench_parser.add_argument('--repeats', type=int, default=3, help='Best-of repeats')
    bench_parser.add_argument('--plot', metavar='PATH', help='Save a scaling plot (PNG)')
    bench_parser.set_defaults(func=cmd_bench)

    gates_parser = subparsers.add_parser('gates', help='List available gates')
    gates_parser.set_defaults(func=cmd_gates)

    info_parser = subparsers.add_parser('info', help='Show qcsim info')
    info_parser.set_defaults(func=cmd_info)
    return parser


def main(argv=None):
    """Main CLI entry point."""
    from .exceptions import SimulationError

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format='%(levelname)s %(name)s: %(message)s')

    if args.command is None:
        parser.print_help()
        return 0

    rng = np.random.default_rng(args.seed)
    try:
        args.func(args, rng)
    except (SimulationError, ValueError) as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
