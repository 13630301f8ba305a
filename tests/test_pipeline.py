"""Tests for the sequential step pipeline."""

import pytest

from gitdeploy import (
    ConfigurationError,
    DeployError,
    ExternalCommandError,
    Failure,
    Success,
    run_pipeline,
    step,
)


class Recorder:
    """Builds steps that record the skip flag they were given."""

    def __init__(self):
        self.calls = []

    def make(self, name, outcome=None):
        def _step(skip):
            self.calls.append((name, skip))
            return outcome if outcome is not None else Success()
        return _step


class TestRunPipeline:
    def test_empty(self):
        assert run_pipeline([]) == Success(skip_rest=False)

    def test_runs_in_order(self):
        rec = Recorder()
        outcome = run_pipeline([rec.make("a"), rec.make("b"), rec.make("c")])
        assert outcome == Success()
        assert rec.calls == [("a", False), ("b", False), ("c", False)]

    def test_skip_is_sticky(self):
        rec = Recorder()
        outcome = run_pipeline([
            rec.make("clone"),
            rec.make("status", Success(skip_rest=True)),
            rec.make("commit"),
            rec.make("push"),
        ])
        assert outcome == Success(skip_rest=True)
        assert rec.calls == [
            ("clone", False), ("status", False), ("commit", True), ("push", True),
        ]

    def test_later_success_does_not_clear_skip(self):
        rec = Recorder()
        run_pipeline([
            rec.make("a", Success(skip_rest=True)),
            rec.make("b", Success(skip_rest=False)),
            rec.make("c"),
        ])
        assert rec.calls[-1] == ("c", True)

    def test_failure_stops(self):
        rec = Recorder()
        err = ExternalCommandError(["git", "push"], 1, stderr="rejected")
        outcome = run_pipeline([rec.make("a"), rec.make("b", Failure(err)), rec.make("c")])
        assert outcome == Failure(err)
        assert outcome.error is err
        assert [name for name, _ in rec.calls] == ["a", "b"]

    def test_raised_deploy_error_becomes_failure(self):
        rec = Recorder()

        def bad(skip):
            raise ConfigurationError("bad pattern")

        outcome = run_pipeline([bad, rec.make("after")])
        assert isinstance(outcome, Failure)
        assert isinstance(outcome.error, ConfigurationError)
        assert rec.calls == []

    def test_other_exceptions_propagate(self):
        def broken(skip):
            raise RuntimeError("bug")

        with pytest.raises(RuntimeError):
            run_pipeline([broken])

    def test_bad_return_value(self):
        with pytest.raises(TypeError):
            run_pipeline([lambda skip: None])

    def test_each_step_invoked_once(self):
        counts = {"a": 0}

        def counted(skip):
            counts["a"] += 1
            return Success()

        run_pipeline([counted])
        assert counts["a"] == 1


class TestStepAdapter:
    def test_runs_callable(self):
        calls = []
        s = step(lambda: calls.append("ran"), "thing")
        assert s(False) == Success()
        assert calls == ["ran"]

    def test_skipped(self):
        calls = []
        s = step(lambda: calls.append("ran"), "thing")
        assert s(True) == Success(skip_rest=True)
        assert calls == []

    def test_error_propagates_to_driver(self):
        def fail():
            raise DeployError("disk full")

        outcome = run_pipeline([step(fail, "copy")])
        assert isinstance(outcome, Failure)
        assert str(outcome.error) == "disk full"

    def test_name(self):
        assert "copy" in step(lambda: None, "copy").__name__
