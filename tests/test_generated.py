import asyncio

import pytest
import lazy
from lazy import ContractViolationError, GeneratedSequence, LazyError, generate, repeat


class TestGenerate:
    """Test generator-function sequences"""

    def test_bounded_sequence(self, recorder):
        visit = recorder()
        seq = generate(lambda i: i * i, 5)
        assert seq.each(visit) is True
        assert visit.calls == [(0, 0), (1, 1), (4, 2), (9, 3), (16, 4)]
        assert seq.length() == 5
        assert seq.is_infinite() is False

    def test_unbounded_sequence_stops_only_when_told(self):
        calls = 0

        def visit(element, index):
            nonlocal calls
            calls += 1
            return calls < 1000

        seq = generate(lambda i: i)
        assert seq.each(visit) is False
        assert calls == 1000
        assert seq.length() is None
        assert seq.is_infinite() is True

    def test_values_are_computed_on_demand(self):
        calls = []
        seq = generate(lambda i: calls.append(i) or i, 100)
        assert calls == []
        assert seq.take(3).to_list() == [0, 1, 2]
        assert calls == [0, 1, 2]

    def test_values_are_not_cached(self):
        calls = []
        seq = generate(lambda i: calls.append(i) or i, 2)
        seq.to_list()
        seq.to_list()
        assert calls == [0, 1, 0, 1]

    def test_zero_length(self, recorder):
        visit = recorder()
        assert generate(lambda i: i, 0).each(visit) is True
        assert visit.calls == []

    def test_take_keeps_a_generated_sequence(self):
        seq = generate(lambda i: i).take(4)
        assert isinstance(seq, GeneratedSequence)
        assert seq.length() == 4
        assert generate(lambda i: i, 2).take(10).length() == 2

    def test_get(self):
        seq = generate(lambda i: i + 100, 3)
        assert seq.get(2) == 102
        with pytest.raises(IndexError):
            seq.get(3)

    def test_count(self):
        assert generate(lambda i: i, 7).count() == 7
        with pytest.raises(LazyError):
            generate(lambda i: i).count()

    def test_repr_of_infinite_sequence_is_bounded(self):
        text = repr(generate(lambda i: i))
        assert text.startswith("GeneratedSequence(0, 1, 2")
        assert text.endswith(", ...)")

    @pytest.mark.parametrize("fn", [None, 5, "lambda i: i"])
    def test_non_callable_generator_is_rejected(self, fn):
        with pytest.raises(ContractViolationError):
            generate(fn, 3)

    @pytest.mark.parametrize("length", [-1, 2.5, "3", True])
    def test_bad_length_is_rejected(self, length):
        with pytest.raises(ContractViolationError):
            generate(lambda i: i, length)

    def test_generator_errors_propagate(self):
        seq = generate(lambda i: 1 // (2 - i), 5)
        with pytest.raises(ZeroDivisionError):
            seq.to_list()


class TestRange:
    """Test numeric ranges"""

    def test_stop_only(self):
        assert lazy.range(10).to_list() == list(range(10))

    def test_start_and_stop(self):
        assert lazy.range(1, 11).to_list() == list(range(1, 11))

    def test_step(self):
        assert lazy.range(2, 10, 2).to_list() == [2, 4, 6, 8]

    def test_negative_step(self):
        assert lazy.range(5, 0, -1).to_list() == [5, 4, 3, 2, 1]

    def test_length_uses_floor(self):
        assert lazy.range(0, 10, 3).to_list() == [0, 3, 6]
        assert lazy.range(0, 10, 3).length() == 3

    def test_fractional_step(self):
        assert lazy.range(0, 1, 0.25).to_list() == [0, 0.25, 0.5, 0.75]

    @pytest.mark.parametrize("args", [(0, 5, -1), (5, 0, 1), (5, 0, 0), (0, 5, 0), (3, 3), (-4,)])
    def test_unreachable_stop_is_empty(self, args):
        seq = lazy.range(*args)
        assert seq.length() == 0
        assert seq.to_list() == []

    @pytest.mark.parametrize("args", [(), ("10",), (1, "a"), (None,), (True,), (1, 2, 3, 4), (float("inf"),)])
    def test_non_numeric_arguments_are_rejected(self, args):
        with pytest.raises(ContractViolationError):
            lazy.range(*args)


class TestRepeat:
    """Test repeated values"""

    def test_counted(self):
        assert repeat("hi", 3).to_list() == ["hi", "hi", "hi"]

    def test_unbounded(self):
        seq = repeat("young")
        assert seq.length() is None
        assert seq.take(4).to_list() == ["young"] * 4

    def test_same_object_every_time(self):
        value = []
        assert all(x is value for x in repeat(value, 3))


class TestAsyncSequence:
    """Test async iteration over a sequence"""

    def test_async_for(self):
        async def collect(seq):
            return [x async for x in seq]

        seq = lazy.range(4).async_()
        assert asyncio.run(collect(seq)) == [0, 1, 2, 3]

    def test_satisfies_each_protocol(self, recorder):
        visit = recorder(stop_when=lambda e, i: i == 1)
        assert repeat(1).async_().each(visit) is False
        assert visit.calls == [(1, 0), (1, 1)]
