import json

import pytest

from schoolstats.normalize import normalize_entries


def make_entry(year, school_type, category, *, school=1, teacher=10, male=50, female=50):
    return {
        "year": year,
        "school": school,
        "type": school_type,
        "category": category,
        "population": {
            "teacher": teacher,
            "sutudent": {
                "data": [
                    {"type": "男", "population": male},
                    {"type": "女", "population": female},
                ]
            },
        },
    }


@pytest.fixture
def raw_entries():
    return [
        make_entry(2020, "合計", "合計", school=30, teacher=300, male=1000, female=1000),
        make_entry(2020, "公立", "小学校", school=10, teacher=100, male=400, female=380),
        make_entry(2020, "私立", "小学校", school=2, teacher=20, male=60, female=70),
        make_entry(2020, "公立", "中学校", school=5, teacher=80, male=300, female=290),
        make_entry(2021, "公立", "小学校", school=10, teacher=98, male=420, female=400),
        make_entry(2021, "私立", "中学校", school=1, teacher=15, male=40, female=None),
        make_entry(2022, "公立", "小学校", school=9, teacher=95, male=441, female=420),
    ]


@pytest.fixture
def records(raw_entries):
    return normalize_entries(raw_entries)


@pytest.fixture
def raw_text(raw_entries):
    return json.dumps(raw_entries, ensure_ascii=False)
