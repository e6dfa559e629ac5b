"""Bounded-concurrency generation across packages with first-error semantics."""

from __future__ import annotations

import threading
from collections import deque
from typing import Callable, Deque, List, Optional, Sequence

from .errors import ConfigurationError, GenerationError
from .logging import get_logger
from .models import PackageUnit

logger = get_logger("scheduler")

GenerateFn = Callable[[PackageUnit], None]


class _HandoffChannel:
    """Unbuffered hand-off from one dispatcher to many workers.

    ``send`` only completes once a worker is waiting to receive, so nothing
    is ever queued ahead of the workers. Errors reported by workers are kept
    in arrival order and wake a blocked sender immediately.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._pending: Optional[PackageUnit] = None
        self._receivers = 0
        self._closed = False
        self._errors: Deque[BaseException] = deque()

    def send(self, package: PackageUnit) -> Optional[BaseException]:
        """Hand ``package`` to an idle worker, or return a reported error instead."""
        with self._cond:
            self._cond.wait_for(
                lambda: self._errors or (self._pending is None and self._receivers > 0)
            )
            if self._errors:
                return self._errors.popleft()
            self._pending = package
            self._cond.notify_all()
            return None

    def receive(self) -> Optional[PackageUnit]:
        """Block until a package is handed over; ``None`` once the channel is closed."""
        with self._cond:
            self._receivers += 1
            self._cond.notify_all()
            self._cond.wait_for(lambda: self._pending is not None or self._closed)
            self._receivers -= 1
            package, self._pending = self._pending, None
            self._cond.notify_all()
            return package

    def report(self, error: BaseException) -> None:
        with self._cond:
            self._errors.append(error)
            self._cond.notify_all()

    def close(self) -> None:
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def first_error(self) -> Optional[BaseException]:
        with self._cond:
            return self._errors[0] if self._errors else None


class GenerationScheduler:
    """Runs ``generate`` for each package on a fixed pool of worker threads.

    Packages are dispatched in key order. The first failure stops further
    dispatching; packages already handed to a worker run to completion and
    their outcome is dropped.
    """

    def __init__(self, generate: GenerateFn, parallelism: int) -> None:
        if parallelism < 1:
            raise ConfigurationError(f"parallelism cannot be < 1; got {parallelism}")
        self._generate = generate
        self.parallelism = parallelism

    def run(self, packages: Sequence[PackageUnit]) -> None:
        """Generate every package, raising the first error observed."""
        ordered = sorted(packages, key=lambda pkg: pkg.computed_package)
        worker_count = min(self.parallelism, len(ordered))
        if worker_count == 0:
            return

        channel = _HandoffChannel()
        workers: List[threading.Thread] = []
        for number in range(worker_count):
            thread = threading.Thread(
                target=self._work,
                args=(channel,),
                name=f"protowrap-generate-{number}",
                daemon=True,
            )
            thread.start()
            workers.append(thread)
        logger.debug("Started %d generation workers", worker_count)

        error: Optional[BaseException] = None
        for package in ordered:
            error = channel.send(package)
            if error is not None:
                break
        channel.close()
        for thread in workers:
            thread.join()

        if error is None:
            # The last packages can fail after everything was dispatched.
            error = channel.first_error()
        if error is not None:
            raise error

    def _work(self, channel: _HandoffChannel) -> None:
        while True:
            package = channel.receive()
            if package is None:
                return
            logger.info("Generating package %s", package.computed_package)
            try:
                self._generate(package)
            except Exception as exc:
                channel.report(_as_generation_error(package, exc))


def _as_generation_error(package: PackageUnit, exc: Exception) -> GenerationError:
    key = package.computed_package
    if isinstance(exc, GenerationError) and exc.package == key:
        return exc
    error = GenerationError(f"error generating package {key}: {exc}", package=key)
    error.__cause__ = exc
    return error


__all__ = ["GenerateFn", "GenerationScheduler"]
