import pytest

from schoolstats.errors import FormatError
from schoolstats.normalize import RECORD_COLUMNS, is_duplicate_total, normalize_entries


def test_end_to_end_example_drops_total_row_and_fills_nulls():
    entries = [
        {"type": "合計", "category": "合計", "year": 2020, "school": 99},
        {
            "year": 2020,
            "school": 5,
            "type": "公立",
            "category": "小学校",
            "population": {
                "teacher": 30,
                "sutudent": {"data": [{"type": "男", "population": 100}, {"type": "女", "population": None}]},
            },
        },
    ]

    df = normalize_entries(entries)

    assert df.to_dict(orient="records") == [
        {
            "year": 2020,
            "school": 5,
            "type": "公立",
            "category": "小学校",
            "teacher": 30,
            "male_student": 100,
            "female_student": 0,
            "total_student": 100,
        }
    ]


def test_output_length_excludes_only_duplicate_totals(raw_entries):
    df = normalize_entries(raw_entries)

    totals = sum(1 for e in raw_entries if is_duplicate_total(e))
    assert totals == 1
    assert len(df) == len(raw_entries) - totals
    assert list(df.columns) == RECORD_COLUMNS


def test_total_label_in_only_one_field_is_kept():
    df = normalize_entries([{"type": "合計", "category": "小学校"}, {"type": "公立", "category": "合計"}])

    assert len(df) == 2


def test_total_student_is_recomputed(records):
    assert (records["total_student"] == records["male_student"] + records["female_student"]).all()


def test_input_total_field_is_ignored():
    entry = {
        "year": 2021,
        "totalStudent": 9999,
        "population": {"sutudent": {"data": [{"type": "男", "population": 3}, {"type": "女", "population": 4}]}},
    }

    df = normalize_entries([entry])

    assert df.loc[0, "total_student"] == 7


def test_missing_population_defaults_to_zero():
    df = normalize_entries([{"year": 2020, "school": 1, "type": "公立", "category": "小学校"}])

    row = df.iloc[0]
    assert row["teacher"] == 0
    assert row["male_student"] == 0
    assert row["female_student"] == 0
    assert row["total_student"] == 0
    assert not df[["teacher", "male_student", "female_student", "total_student"]].isna().any().any()


def test_student_key_spelling_is_accepted():
    entry = {"population": {"student": {"data": [{"type": "女", "population": 12}]}}}

    df = normalize_entries([entry])

    assert df.loc[0, "female_student"] == 12
    assert df.loc[0, "male_student"] == 0


def test_non_numeric_counts_become_zero():
    entry = {"school": "n/a", "population": {"teacher": None, "sutudent": {"data": [{"type": "男", "population": "x"}]}}}

    df = normalize_entries([entry])

    assert df.loc[0, "school"] == 0
    assert df.loc[0, "teacher"] == 0
    assert df.loc[0, "male_student"] == 0


def test_missing_year_is_null_and_labels_are_blank():
    df = normalize_entries([{"school": 1}])

    assert df["year"].isna().all()
    assert df.loc[0, "type"] == ""
    assert df.loc[0, "category"] == ""


def test_empty_list_is_valid():
    df = normalize_entries([])

    assert df.empty
    assert list(df.columns) == RECORD_COLUMNS


@pytest.mark.parametrize("payload", [{"year": 2020}, "text", 3, None])
def test_non_list_raises_format_error(payload):
    with pytest.raises(FormatError):
        normalize_entries(payload)


def test_input_is_not_mutated(raw_entries):
    before = [dict(e) for e in raw_entries]

    normalize_entries(raw_entries)

    assert raw_entries == before


def test_out_of_range_count_is_treated_as_missing():
    entry = {
        "school": 10**20,
        "population": {
            "teacher": float("inf"),
            "sutudent": {"data": [{"type": "男", "population": 10**20}, {"type": "女", "population": 7}]},
        },
    }

    df = normalize_entries([entry])

    assert df.loc[0, "school"] == 0
    assert df.loc[0, "teacher"] == 0
    assert df.loc[0, "male_student"] == 0
    assert df.loc[0, "total_student"] == df.loc[0, "female_student"] == 7


def test_out_of_range_year_is_null():
    df = normalize_entries([{"year": 10**20}, {"year": "1e400"}, {"year": " 2021 "}])

    assert df["year"].isna().tolist() == [True, True, False]
    assert df.loc[2, "year"] == 2021
