import asyncio
import logging

import pytest

from stepflow.exceptions import ConfigurationError, FaultError, Panic
from stepflow.guard import PanicGuard, catch_panic_as_error, extract_type, panic


class DiskFull(Exception):
    pass


def test_normal_return_passes_through_unchanged():
    sentinel = object()
    returned_err = ValueError("returned, not raised")

    assert catch_panic_as_error(lambda: None) is None
    assert catch_panic_as_error(lambda: returned_err) is returned_err
    assert catch_panic_as_error(lambda: sentinel) is sentinel


def test_normal_return_never_calls_extractors():
    calls = []

    def extractor(payload):
        calls.append(payload)
        return ValueError("should not be used")

    assert catch_panic_as_error(lambda: None, extractor) is None
    assert calls == []


def test_unmatched_fault_keeps_payload_text():
    def step():
        raise IndexError("index out of range: 5")

    err = catch_panic_as_error(step)
    assert isinstance(err, FaultError)
    assert str(err) == "index out of range: 5"
    assert isinstance(err.__cause__, IndexError)


def test_panic_with_non_error_payload():
    err = catch_panic_as_error(lambda: panic("index out of range: 5"))
    assert isinstance(err, FaultError)
    assert str(err) == "index out of range: 5"
    assert err.payload == "index out of range: 5"

    err = catch_panic_as_error(lambda: panic(42))
    assert str(err) == "42"
    assert err.payload == 42
    assert isinstance(err.__cause__, Panic)


def test_first_matching_extractor_wins_and_stops_the_chain():
    calls = []
    chosen = DiskFull("no space left")

    def never(payload):
        calls.append("never")
        return None

    def first(payload):
        calls.append("first")
        return chosen

    def later(payload):
        calls.append("later")
        return ValueError("too late")

    err = catch_panic_as_error(lambda: panic({"code": 28}), never, first, later)
    assert err is chosen
    assert calls == ["never", "first"]


def test_extractors_receive_the_panic_payload():
    seen = []

    def capture(payload):
        seen.append(payload)
        return None

    catch_panic_as_error(lambda: panic(("a", 1)), capture)
    assert seen == [("a", 1)]


def test_extractors_receive_raised_exceptions_directly():
    raised = DiskFull("disk full")

    def step():
        raise raised

    err = catch_panic_as_error(step, extract_type(DiskFull))
    assert err is raised


def test_failing_extractor_is_skipped(caplog):
    def broken(payload):
        raise RuntimeError("extractor bug")

    with caplog.at_level(logging.WARNING, logger="stepflow.guard"):
        err = catch_panic_as_error(lambda: panic("boom"), broken)

    assert isinstance(err, FaultError)
    assert str(err) == "boom"
    assert "treating it as not matching" in caplog.text


def test_extractor_returning_a_non_error_is_skipped(caplog):
    chosen = DiskFull("disk full")

    def wrong_type(payload):
        return "not an error"

    with caplog.at_level(logging.WARNING, logger="stepflow.guard"):
        err = catch_panic_as_error(lambda: panic(28), wrong_type, lambda p: chosen)
    assert err is chosen
    assert "instead of an error" in caplog.text

    err = catch_panic_as_error(lambda: panic("boom"), lambda p: 0)
    assert isinstance(err, FaultError)
    assert str(err) == "boom"


def test_extract_type_with_factory_and_plain_payloads():
    by_factory = extract_type(int, factory=lambda code: DiskFull(f"errno {code}"))
    err = catch_panic_as_error(lambda: panic(28), by_factory)
    assert isinstance(err, DiskFull)
    assert str(err) == "errno 28"

    plain = extract_type(str)
    err = catch_panic_as_error(lambda: panic("broken pipe"), plain)
    assert isinstance(err, FaultError)
    assert err.payload == "broken pipe"

    assert plain(3) is None


def test_extract_type_requires_a_type():
    with pytest.raises(ConfigurationError):
        extract_type()


def test_guard_rejects_non_callable_extractors():
    with pytest.raises(ConfigurationError):
        PanicGuard(["not callable"])  # type: ignore[list-item]


def test_guard_is_reusable():
    guard = PanicGuard([extract_type(KeyError)])

    def missing():
        return {}["k"]

    first = guard.run(missing)
    second = guard.run(missing)
    assert isinstance(first, KeyError)
    assert isinstance(second, KeyError)
    assert first is not second
    assert guard.run(lambda: "ok") == "ok"


def test_base_exceptions_are_not_intercepted():
    def interrupt():
        raise KeyboardInterrupt

    with pytest.raises(KeyboardInterrupt):
        catch_panic_as_error(interrupt)


def test_fault_is_logged_once_at_configured_level(caplog):
    guard = PanicGuard(log_level=logging.ERROR)

    with caplog.at_level(logging.ERROR, logger="stepflow.guard"):
        guard.run(lambda: panic("boom"))

    records = [r for r in caplog.records if r.name == "stepflow.guard"]
    assert len(records) == 1
    assert records[0].levelno == logging.ERROR
    assert records[0].exc_info is not None


def test_arun_mirrors_run():
    guard = PanicGuard([extract_type(DiskFull)])

    async def ok():
        return None

    async def full():
        await asyncio.sleep(0)
        raise DiskFull("disk full")

    async def unknown():
        panic("index out of range: 5")

    assert asyncio.run(guard.arun(ok)) is None
    assert isinstance(asyncio.run(guard.arun(full)), DiskFull)
    err = asyncio.run(guard.arun(unknown))
    assert isinstance(err, FaultError)
    assert str(err) == "index out of range: 5"


def test_arun_lets_cancellation_propagate():
    guard = PanicGuard()

    async def cancelled():
        raise asyncio.CancelledError()

    with pytest.raises(asyncio.CancelledError):
        asyncio.run(guard.arun(cancelled))
