import math

import pandas as pd
import pytest

from schoolstats.pagination import PageState, normalize_page_size, paginate, total_pages


@pytest.mark.parametrize("count", [0, 1, 24, 25, 26, 101])
@pytest.mark.parametrize("page_size", [1, 10, 25, 100])
def test_pages_reconstruct_sequence(count, page_size):
    df = pd.DataFrame({"n": range(count)})

    pages = total_pages(count, page_size)
    assert pages == math.ceil(count / page_size)

    chunks = [paginate(df, p, page_size).rows for p in range(1, pages + 1)]
    joined = pd.concat(chunks, ignore_index=True) if chunks else df.iloc[0:0]
    assert joined["n"].tolist() == list(range(count))


def test_page_metadata():
    df = pd.DataFrame({"n": range(30)})

    page = paginate(df, 2, 25)

    assert page.rows["n"].tolist() == list(range(25, 30))
    assert page.meta() == {
        "page": 2,
        "page_size": 25,
        "total_pages": 2,
        "total_rows": 30,
        "has_prev": True,
        "has_next": False,
        "label": "2 / 2",
    }


def test_out_of_range_page_is_empty():
    df = pd.DataFrame({"n": range(5)})

    assert paginate(df, 9, 10).rows.empty
    assert paginate(df, 0, 10).page == 1


def test_zero_records_keep_page_one():
    page = paginate(pd.DataFrame({"n": []}), 1, 25)

    assert page.total_pages == 0
    assert page.page == 1
    assert PageState().next(0).page == 1


def test_invalid_page_size_raises():
    with pytest.raises(ValueError):
        total_pages(10, 0)


def test_page_state_saturates():
    state = PageState(page=1, page_size=10)

    assert state.prev() == state
    last = state.next(3).next(3)
    assert last.page == 3
    assert last.next(3) == last
    assert last.prev().page == 2


def test_page_size_change_resets_page():
    state = PageState(page=4, page_size=10)

    assert state.with_page_size(50) == PageState(page=1, page_size=50)
    assert state.reset().page == 1


def test_normalize_page_size():
    assert normalize_page_size("50") == 50
    assert normalize_page_size(7) == 25
    assert normalize_page_size(None) == 25
