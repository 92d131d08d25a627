from hypothesis import given
from hypothesis import strategies as st

from n8n_mcp.core.self_test import pass_rate

_RUNS = st.integers(min_value=1, max_value=500).flatmap(
    lambda total: st.tuples(st.integers(min_value=0, max_value=total), st.just(total))
)


@given(_RUNS)
def test_pass_rate_is_bounded_percentage(counts: tuple[int, int]) -> None:
    passed, total = counts
    rate = pass_rate(passed, total)
    assert 0.0 <= rate <= 100.0
    assert rate == round(rate, 1)
    assert (rate == 100.0) == (passed == total)


@given(st.integers(min_value=0, max_value=50))
def test_pass_rate_of_empty_total_is_zero(passed: int) -> None:
    assert pass_rate(passed, 0) == 0.0
