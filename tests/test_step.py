from dataclasses import dataclass

from stepflow.step import StepReader, StepStatus, describe


@dataclass(eq=False)
class FakeStep:
    name: str
    status: StepStatus = StepStatus.PENDING


def test_status_renders_as_bare_name():
    assert str(StepStatus.PENDING) == "Pending"
    assert str(StepStatus.CANCELED) == "Canceled"


def test_terminal_statuses():
    assert not StepStatus.PENDING.is_terminal()
    assert not StepStatus.RUNNING.is_terminal()
    for status in (
        StepStatus.FAILED,
        StepStatus.SUCCEEDED,
        StepStatus.CANCELED,
        StepStatus.SKIPPED,
    ):
        assert status.is_terminal()


def test_fake_step_satisfies_protocol():
    assert isinstance(FakeStep("a"), StepReader)
    assert not isinstance(object(), StepReader)


def test_describe_reads_status_at_call_time():
    step = FakeStep("fetch")
    assert describe(step) == "fetch [Pending]"
    step.status = StepStatus.RUNNING
    assert describe(step) == "fetch [Running]"
