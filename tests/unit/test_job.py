"""
Job and JobStack Unit Tests
Tests for job attribute resolution and the scoped job stack.
"""

import pytest
from dataclasses import dataclass

from cranker.core.errors import ContractViolation, ErrorCode, FactoryError
from cranker.core.job import Job, JobStack, RETURN_ATTRIBUTES


@dataclass
class Widget:
    name: str = ""
    size: int = 0


class TestJob:
    """Test Job attribute handling"""

    def test_overrides_win_over_defaults(self):
        """Test that overrides replace defaults of the same name"""
        job = Job('widget', {'name': 'custom'})
        job.defaults = {'name': 'default', 'size': 3}

        assert job.attributes == {'name': 'custom', 'size': 3}

    def test_reserved_options_are_not_attributes(self):
        """Test that engine options never reach the model"""
        job = Job('widget', {'traits': ['big'], RETURN_ATTRIBUTES: True, 'size': 1})

        assert job.attributes == {'size': 1}

    def test_traits_normalization(self):
        """Test that a single trait name is treated as a one element list"""
        assert Job('widget', {'traits': 'big'}).traits == ['big']
        assert Job('widget', {'traits': ('big', 'red')}).traits == ['big', 'red']
        assert Job('widget', {}).traits == []

    def test_lazy_attributes_see_resolved_values(self):
        """Test that callables are resolved with the other attributes available"""
        job = Job('widget', {'name': 'bolt'})
        job.defaults = {
            'label': lambda w: f"{w.name}-{w.size}",
            'name': 'default',
            'size': 4,
        }

        assert job.resolve_attributes() == {'label': 'bolt-4', 'name': 'bolt', 'size': 4}

    def test_lazy_attributes_resolve_in_order(self):
        """Test that a lazy value can use an earlier lazy value"""
        job = Job('widget', {})
        job.defaults = {
            'first': lambda w: 'a',
            'second': lambda w: w.first + 'b',
        }

        assert job.resolve_attributes() == {'first': 'a', 'second': 'ab'}

    def test_classes_are_plain_values(self):
        """Test that a class given as a value is not called"""
        job = Job('widget', {'kind': Widget})

        assert job.resolve_attributes() == {'kind': Widget}

    def test_execute_instantiates_model(self):
        """Test executing a job builds the model"""
        job = Job('widget', {'size': 2})
        job.defaults = {'name': 'bolt'}

        widget = job.execute(Widget)

        assert widget == Widget(name='bolt', size=2)

    def test_execute_ignores_unknown_attributes(self):
        """Test that attributes the model does not accept are dropped"""
        job = Job('widget', {'colour': 'red', 'size': 2})

        widget = job.execute(Widget)

        assert widget == Widget(size=2)

    def test_execute_returns_attributes(self):
        """Test attribute-only jobs return a plain dict"""
        job = Job('widget', {RETURN_ATTRIBUTES: True, 'colour': 'red'})
        job.defaults = {'name': 'bolt'}

        assert job.return_attributes is True
        assert job.execute(Widget) == {'name': 'bolt', 'colour': 'red'}

    def test_execute_without_model(self):
        """Test that a missing model is reported"""
        job = Job('widget', {})

        with pytest.raises(FactoryError) as exc_info:
            job.execute()
        assert exc_info.value.code == ErrorCode.MISSING_MODEL


class TestJobStack:
    """Test JobStack push/pop discipline"""

    def setup_method(self):
        """Setup test fixtures for each test"""
        self.stack = JobStack()

    def test_current_on_empty_stack(self):
        """Test that reading an empty stack is a contract violation"""
        with pytest.raises(ContractViolation) as exc_info:
            self.stack.current()
        assert exc_info.value.code == ErrorCode.NO_ACTIVE_JOB

    def test_pop_on_empty_stack(self):
        """Test popping an empty stack"""
        with pytest.raises(ContractViolation):
            self.stack.pop()

    def test_push_and_pop_are_lifo(self):
        """Test jobs come off in reverse order"""
        self.stack.push('outer', {})
        self.stack.push('inner', {'a': 1})

        assert self.stack.depth == 2
        assert self.stack.current().target == 'inner'
        assert self.stack.pop().target == 'inner'
        assert self.stack.current().target == 'outer'

    def test_frame_nesting(self):
        """Test nested frames expose the innermost job"""
        with self.stack.frame('outer', {}) as outer:
            assert self.stack.current() is outer
            with self.stack.frame('inner', {}) as inner:
                assert self.stack.current() is inner
                assert self.stack.depth == 2
            assert self.stack.current() is outer

        assert self.stack.depth == 0

    def test_frame_pops_on_error(self):
        """Test that a failing block still pops its job"""
        with pytest.raises(RuntimeError):
            with self.stack.frame('outer', {}):
                with self.stack.frame('inner', {}):
                    raise RuntimeError("boom")

        assert self.stack.depth == 0
        assert len(self.stack) == 0

    def test_clear(self):
        """Test clearing the stack"""
        self.stack.push('a', {})
        self.stack.push('b', {})

        self.stack.clear()

        assert self.stack.depth == 0
