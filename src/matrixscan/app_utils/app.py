# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

import functools
import threading

from .logger import Logger

logger = Logger("App")

_ROLE_ATTR = "_brick_role"
_LOOP = "loop"
_EXECUTE = "execute"


class _BrickRunner:
    """Runs the lifecycle of a single started brick."""

    def __init__(self, instance):
        self.instance = instance
        self._stop_event = threading.Event()
        self._threads: list[threading.Thread] = []

    def start(self):
        start = getattr(self.instance, "start", None)
        if callable(start):
            start()

        for method in _methods_with_role(self.instance, _LOOP):
            self._spawn(self._run_loop, method)
        for method in _methods_with_role(self.instance, _EXECUTE):
            self._spawn(self._run_execute, method)

    def stop(self, join_timeout: float = 1.0):
        self._stop_event.set()
        stop = getattr(self.instance, "stop", None)
        if callable(stop):
            try:
                stop()
            except Exception as e:
                logger.exception(f"Failed to stop {self.instance!r}: {e}")

        for t in self._threads:
            if t is not threading.current_thread():
                t.join(timeout=join_timeout)
        self._threads.clear()

    def _spawn(self, target, method):
        t = threading.Thread(target=target, args=(method,), name=f"{type(self.instance).__name__}.{method.__name__}", daemon=True)
        self._threads.append(t)
        t.start()

    def _run_loop(self, method):
        while not self._stop_event.is_set():
            try:
                method()
            except Exception as e:
                logger.exception(f"Error in loop method {method.__name__} of {self.instance!r}: {e}")
                # Avoid spinning on a method that keeps failing
                self._stop_event.wait(0.1)

    def _run_execute(self, method):
        try:
            method()
        except Exception as e:
            logger.exception(f"Error in execute method {method.__name__} of {self.instance!r}: {e}")


def _methods_with_role(instance, role: str) -> list:
    """Collect the bound methods playing a role: the default-named one plus the decorated ones."""
    found = []
    default = getattr(type(instance), role, None)
    if callable(default):
        found.append(getattr(instance, role))

    for name in dir(type(instance)):
        if name == role:
            continue
        attr = getattr(type(instance), name, None)
        if callable(attr) and getattr(attr, _ROLE_ATTR, None) == role:
            found.append(getattr(instance, name))
    return found


class AppController:
    """Owns the lifecycle of every brick in the application.

    Bricks created before run() are started automatically when the app runs.
    Bricks created afterwards are only registered and must be started with start_brick().
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._pending: list = []
        self._runners: dict[int, _BrickRunner] = {}
        self._running = False
        self._stop_event = threading.Event()

    def register(self, instance):
        """Register a brick instance. Called by the @brick decorator."""
        with self._lock:
            if self._running:
                logger.debug(f"{instance!r} created after App.run(), it must be started manually")
                return
            if not any(b is instance for b in self._pending):
                self._pending.append(instance)

    def start_brick(self, instance):
        """Start a brick (or any object exposing start/stop) and its loop/execute methods."""
        with self._lock:
            if id(instance) in self._runners:
                return
            self._pending = [b for b in self._pending if b is not instance]
            runner = _BrickRunner(instance)
            self._runners[id(instance)] = runner
        runner.start()

    def stop_brick(self, instance):
        """Stop a brick previously started with start_brick() or by run()."""
        with self._lock:
            runner = self._runners.pop(id(instance), None)
            self._pending = [b for b in self._pending if b is not instance]
        if runner is not None:
            runner.stop()

    def run(self):
        """Start the registered bricks and block until the app is stopped."""
        with self._lock:
            self._stop_event.clear()
            self._running = True
            pending = list(self._pending)
            self._pending.clear()

        for instance in pending:
            self.start_brick(instance)

        try:
            while not self._stop_event.wait(0.1):
                pass
        except KeyboardInterrupt:
            logger.info("Interrupted, stopping the app")
        finally:
            self._stop_all_bricks()
            with self._lock:
                self._running = False

    def _stop_all_bricks(self):
        with self._lock:
            runners = list(self._runners.values())
            self._runners.clear()
        for runner in reversed(runners):
            runner.stop()
        self._stop_event.set()


App = AppController()


def brick(cls):
    """Class decorator that hands every new instance over to the App lifecycle."""
    original_init = cls.__init__

    @functools.wraps(original_init)
    def __init__(self, *args, **kwargs):
        original_init(self, *args, **kwargs)
        # Resolved at call time so the controller can be swapped. Registration is idempotent
        # when both a brick and its subclass are decorated.
        App.register(self)

    cls.__init__ = __init__
    return cls


def _mark(role: str):
    def decorator(fn):
        setattr(fn, _ROLE_ATTR, role)
        return fn

    return decorator


brick.loop = _mark(_LOOP)
brick.execute = _mark(_EXECUTE)
