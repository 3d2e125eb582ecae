# src/utils/rwlock.py

import threading
import time
from contextlib import contextmanager
from typing import Optional


class ReadWriteLock:
    """
    Lock 'shared' (read) dan 'exclusive' (write) untuk thread.
    Banyak reader boleh bersamaan; writer eksklusif terhadap semua.
    Writer yang sedang menunggu didahulukan supaya tidak kelaparan.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    def _wait_until(self, predicate, timeout):
        # Dipanggil dengan self._cond sudah dipegang
        if timeout is None:
            while not predicate():
                self._cond.wait()
            return True

        deadline = time.monotonic() + timeout
        while not predicate():
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return False
            self._cond.wait(remaining)
        return True

    def acquire_read(self, timeout: Optional[float] = None) -> bool:
        with self._cond:
            ok = self._wait_until(
                lambda: not self._writer and self._waiting_writers == 0, timeout
            )
            if ok:
                self._readers += 1
            return ok

    def release_read(self):
        with self._cond:
            if self._readers == 0:
                raise RuntimeError("release_read() called without a held read lock")
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self, timeout: Optional[float] = None) -> bool:
        with self._cond:
            self._waiting_writers += 1
            try:
                ok = self._wait_until(
                    lambda: not self._writer and self._readers == 0, timeout
                )
            finally:
                self._waiting_writers -= 1
            if ok:
                self._writer = True
            else:
                # Reader yang tertahan oleh writer ini boleh jalan lagi
                self._cond.notify_all()
            return ok

    def release_write(self):
        with self._cond:
            if not self._writer:
                raise RuntimeError("release_write() called without a held write lock")
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read_locked(self):
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self):
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()

    @property
    def readers(self) -> int:
        return self._readers

    @property
    def write_held(self) -> bool:
        return self._writer
