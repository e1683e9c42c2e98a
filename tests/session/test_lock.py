"""Tests for ReadWriteLock — shared reads, exclusive writes."""

import threading

from flysession.session.lock import ReadWriteLock


def _start(target) -> threading.Thread:
    thread = threading.Thread(target=target, daemon=True)
    thread.start()
    return thread


class TestReadWriteLock:
    def test_concurrent_reads_do_not_block(self):
        lock = ReadWriteLock()
        acquired = threading.Event()

        def reader() -> None:
            with lock.read():
                acquired.set()

        with lock.read():
            _start(reader)
            assert acquired.wait(timeout=1.0)

    def test_write_waits_for_in_flight_reads(self):
        lock = ReadWriteLock()
        acquired = threading.Event()

        def writer() -> None:
            with lock.write():
                acquired.set()

        lock.acquire_read()
        thread = _start(writer)
        assert not acquired.wait(timeout=0.05)
        lock.release_read()
        assert acquired.wait(timeout=1.0)
        thread.join(timeout=1.0)

    def test_read_waits_for_write(self):
        lock = ReadWriteLock()
        acquired = threading.Event()

        def reader() -> None:
            with lock.read():
                acquired.set()

        lock.acquire_write()
        thread = _start(reader)
        assert not acquired.wait(timeout=0.05)
        lock.release_write()
        assert acquired.wait(timeout=1.0)
        thread.join(timeout=1.0)

    def test_writes_are_exclusive(self):
        lock = ReadWriteLock()
        acquired = threading.Event()

        def writer() -> None:
            with lock.write():
                acquired.set()

        lock.acquire_write()
        _start(writer)
        assert not acquired.wait(timeout=0.05)
        lock.release_write()
        assert acquired.wait(timeout=1.0)

    def test_waiting_writer_blocks_new_readers(self):
        lock = ReadWriteLock()
        writer_done = threading.Event()
        reader_done = threading.Event()

        def writer() -> None:
            with lock.write():
                writer_done.set()

        def reader() -> None:
            with lock.read():
                reader_done.set()

        lock.acquire_read()
        _start(writer)
        # let the writer queue up before the second reader arrives
        assert not writer_done.wait(timeout=0.05)
        _start(reader)
        assert not reader_done.wait(timeout=0.05)

        lock.release_read()
        assert writer_done.wait(timeout=1.0)
        assert reader_done.wait(timeout=1.0)

    def test_lock_released_on_exception(self):
        lock = ReadWriteLock()
        try:
            with lock.write():
                raise RuntimeError("boom")
        except RuntimeError:
            pass

        acquired = threading.Event()

        def reader() -> None:
            with lock.read():
                acquired.set()

        _start(reader)
        assert acquired.wait(timeout=1.0)
