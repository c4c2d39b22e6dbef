"""
Isolated execution of simulations.

:class:`SimulationWorker` runs each circuit as a separate job on a
``concurrent.futures`` executor (a process pool by default), so a long
simulation never blocks the caller and independent circuits run in
parallel. Jobs share nothing: each builds its own state and its own RNG.

:meth:`SimulationWorker.run_circuit` is the error boundary. It never raises
for a failed simulation; it logs the exception and hands back a
:class:`WorkerResponse` carrying a user-facing message.

Example
-------
>>> from qcsim import CircuitBuilder
>>> from qcsim.worker import SimulationWorker
>>> with SimulationWorker(max_workers=2) as worker:
...     response = worker.run_circuit(CircuitBuilder(1).h(0).build(), shots=100)
>>> response.ok
True
"""

from __future__ import annotations

import itertools
import logging
import threading
from concurrent.futures import Executor, Future, ProcessPoolExecutor, ThreadPoolExecutor
from dataclasses import dataclass

from numpy import ndarray

from qcsim.benchmark import BenchmarkResult, benchmark
from qcsim.circuit import QuantumCircuit
from qcsim.config import DEFAULT_CONFIG, SimulatorConfig
from qcsim.engine.simulator import SimulationResult, probabilities, run_circuit, state_string
from qcsim.exceptions import SimulationError

logger = logging.getLogger(__name__)


@dataclass
class WorkerResponse:
    """Outcome of a job: either a result or a displayable error."""

    ok: bool
    result: SimulationResult | None = None
    error: str | None = None
    error_type: str | None = None

    def unwrap(self) -> SimulationResult:
        """Return the result or raise ``SimulationError`` with the message."""
        if not self.ok or self.result is None:
            raise SimulationError(self.error or "simulation failed")
        return self.result


def _run_job(
    circuit: QuantumCircuit, shots: int, config: SimulatorConfig, stream: int
) -> SimulationResult:
    """Job entry point; module-level so process pools can pickle it."""
    return run_circuit(circuit, shots=shots, rng=config.make_rng(stream), config=config)


class SimulationWorker:
    """
    Run simulations off the calling thread.

    Parameters
    ----------
    max_workers : int, optional
        Pool size; the executor's default when omitted.
    use_processes : bool
        Process pool (isolated interpreters) when True, thread pool otherwise.
    config : SimulatorConfig, optional
        Passed to every job. With a seed set, job ``k`` draws from child
        stream ``k`` of that seed.
    """

    def __init__(
        self,
        max_workers: int | None = None,
        use_processes: bool = True,
        config: SimulatorConfig | None = None,
    ) -> None:
        self.config = config or DEFAULT_CONFIG
        self.use_processes = use_processes
        if use_processes:
            self._executor: Executor = ProcessPoolExecutor(max_workers=max_workers)
        else:
            self._executor = ThreadPoolExecutor(
                max_workers=max_workers, thread_name_prefix="qcsim"
            )
        self._jobs = itertools.count()
        self._lock = threading.Lock()
        self._closed = False
        logger.debug(
            "Simulation worker started (%s pool, max_workers=%s)",
            "process" if use_processes else "thread", max_workers,
        )

    # -- Jobs ---------------------------------------------------------------

    def submit(self, circuit: QuantumCircuit, shots: int | None = None) -> Future:
        """Queue ``circuit`` and return a Future for its SimulationResult."""
        with self._lock:
            if self._closed:
                raise RuntimeError("SimulationWorker has been shut down")
            stream = next(self._jobs)
        if shots is None:
            shots = self.config.shots
        return self._executor.submit(_run_job, circuit, shots, self.config, stream)

    def run_circuit(
        self,
        circuit: QuantumCircuit,
        shots: int | None = None,
        timeout: float | None = None,
    ) -> WorkerResponse:
        """
        Run ``circuit`` and wait for it, converting failures to a response.

        ``timeout`` bounds the wait only; a job already running is not
        interrupted (use ``SimulatorConfig.timeout`` for that).
        """
        future = self.submit(circuit, shots)
        try:
            result = future.result(timeout=timeout)
        except SimulationError as exc:
            logger.exception("Simulation of %s failed", circuit.id)
            return WorkerResponse(
                ok=False, error=str(exc), error_type=type(exc).__name__
            )
        except Exception as exc:
            logger.exception("Unexpected error while simulating %s", circuit.id)
            return WorkerResponse(
                ok=False,
                error=f"Unexpected error: {exc}",
                error_type=type(exc).__name__,
            )
        return WorkerResponse(ok=True, result=result)

    def run_many(
        self, circuits: list[QuantumCircuit], shots: int | None = None
    ) -> list[WorkerResponse]:
        """Run independent circuits concurrently; responses keep input order."""
        futures = [self.submit(c, shots) for c in circuits]
        responses = []
        for circuit, future in zip(circuits, futures):
            exc = future.exception()
            if exc is None:
                responses.append(WorkerResponse(ok=True, result=future.result()))
            else:
                logger.error("Simulation of %s failed: %s", circuit.id, exc)
                responses.append(
                    WorkerResponse(ok=False, error=str(exc), error_type=type(exc).__name__)
                )
        return responses

    # -- Views --------------------------------------------------------------

    def state_string(self, result: SimulationResult) -> str:
        return state_string(result, self.config.display_threshold)

    def probabilities(self, result: SimulationResult) -> ndarray:
        return probabilities(result)

    def benchmark(self, num_qubits: int, num_gates: int) -> BenchmarkResult:
        """Time a generated circuit inside the pool."""
        return self._executor.submit(benchmark, num_qubits, num_gates).result()

    # -- Lifecycle ----------------------------------------------------------

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            self._closed = True
        self._executor.shutdown(wait=wait)
        logger.debug("Simulation worker stopped")

    def __enter__(self) -> SimulationWorker:
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()

    def __repr__(self) -> str:
        kind = "process" if self.use_processes else "thread"
        return f"SimulationWorker({kind}, closed={self._closed})"
