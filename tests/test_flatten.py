from lazy import Lazy, recursive_for_each


class TestRecursiveForEach:
    """Test the depth-first walk over nested lists"""

    def test_visits_every_leaf_in_order(self, recorder):
        visit = recorder()
        assert recursive_for_each([1, [2, [3, [4]], 5]], visit) is True
        assert visit.elements == [1, 2, 3, 4, 5]

    def test_indices_continue_across_levels(self, recorder):
        visit = recorder()
        recursive_for_each([[1, 2], [3, [4, 5]]], visit)
        assert visit.indices == [0, 1, 2, 3, 4]

    def test_stop_propagates_through_every_level(self, recorder):
        visit = recorder(stop_when=lambda e, i: e == 3)
        assert recursive_for_each([[1, 2], [3, [4, 5]]], visit) is False
        assert visit.elements == [1, 2, 3]

    def test_stop_inside_deep_branch_skips_siblings(self, recorder):
        visit = recorder(stop_when=lambda e, i: e == "deep")
        completed = recursive_for_each([[["deep", "x"], "y"], "z"], visit)
        assert completed is False
        assert visit.elements == ["deep"]

    def test_empty_structures_contribute_nothing(self, recorder):
        visit = recorder()
        assert recursive_for_each([[], 1, [[], []], [2], []], visit) is True
        assert visit.calls == [(1, 0), (2, 1)]

    def test_shared_counter(self, recorder):
        visit = recorder()
        counter = [10]
        recursive_for_each([1, [2]], visit, counter)
        assert visit.indices == [10, 11]
        assert counter == [12]

    def test_strings_and_mappings_are_leaves(self, recorder):
        visit = recorder()
        recursive_for_each(["ab", [{"k": 1}]], visit)
        assert visit.elements == ["ab", {"k": 1}]


class TestFlatten:
    """Test the flatten() operator"""

    def test_flatten_list(self):
        assert Lazy([1, [2, [3, [4]]], 5]).flatten().to_list() == [1, 2, 3, 4, 5]

    def test_flatten_each_stops_early(self, recorder):
        visit = recorder(stop_when=lambda e, i: e == 3)
        assert Lazy([[1, 2], [3, [4, 5]]]).flatten().each(visit) is False
        assert visit.calls == [(1, 0), (2, 1), (3, 2)]

    def test_flatten_nested_sequences(self):
        nested = [Lazy([1, 2]), [Lazy((3,)), 4]]
        assert Lazy(nested).flatten().to_list() == [1, 2, 3, 4]

    def test_flatten_is_lazy(self):
        calls = []
        seq = Lazy([1, [2, 3], 4]).map(lambda x: calls.append(x) or x).flatten()
        assert seq.take(2).to_list() == [1, 2]
        assert calls == [1, [2, 3]]

    def test_string_sequences_are_leaves(self):
        inner = Lazy("ab")
        flattened = Lazy([inner, "cd"]).flatten().to_list()
        assert len(flattened) == 2
        assert flattened[0] is inner
        assert flattened[1] == "cd"

    def test_walker_keeps_string_sequences_whole(self, recorder):
        inner = Lazy("xy")
        visit = recorder()
        assert recursive_for_each([1, [inner]], visit) is True
        assert visit.elements == [1, inner]
