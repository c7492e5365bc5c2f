import numpy as np
import pandas as pd
import pytest

from academic_market.agents.factories import create_departments, create_faculty_members
from academic_market.config.params import build_params
from academic_market.engines.openings import generate_job_openings, merge_openings
from academic_market.exceptions import InvariantViolationError
from academic_market.state.schema import (
    DEPT_ID,
    DEPT_OPENINGS,
    FAC_MOBILITY_RISK,
    FAC_RETIREMENT_RISK,
    FAC_STATUS,
    FACULTY_COLS,
    FACULTY_DTYPES,
    OPENINGS_COLS,
    empty_frame,
)

pytestmark = pytest.mark.engines

NO_EXTRA_OPENINGS = build_params(growth_openings_lambda=0.0, baseline_openings_lambda=0.0)


@pytest.fixture
def departments(rng):
    return create_departments(4, rng)


@pytest.fixture
def faculty(rng, departments):
    return create_faculty_members(40, rng, department_id=np.repeat(departments[DEPT_ID].to_numpy(), 10))


def test_one_non_negative_row_per_department(rng, departments, faculty):
    result = generate_job_openings(faculty, departments, 2005, rng)

    openings = result.openings
    assert list(openings.columns) == OPENINGS_COLS
    assert openings[DEPT_ID].tolist() == departments[DEPT_ID].tolist()
    assert openings[DEPT_OPENINGS].dtype == "int64"
    assert (openings[DEPT_OPENINGS] >= 0).all()


def test_department_without_faculty_still_listed(rng, departments):
    faculty = create_faculty_members(5, rng, department_id=departments[DEPT_ID].iloc[0])
    result = generate_job_openings(faculty, departments, 2005, rng)
    assert len(result.openings) == len(departments)


def test_faculty_status_recomputed_on_copy(rng, departments, faculty):
    result = generate_job_openings(faculty, departments, 2005, rng)

    assert (faculty[FAC_STATUS] == "staying").all()
    assert set(result.faculty[FAC_STATUS]) <= {"staying", "retiring", "moving"}
    assert len(result.faculty) == len(faculty)


def test_certain_retirement_opens_every_seat(rng, departments):
    faculty = create_faculty_members(5, rng, department_id=[1, 1, 1, 2, 2])
    faculty[FAC_RETIREMENT_RISK] = 1.0
    faculty[FAC_MOBILITY_RISK] = 1.0

    result = generate_job_openings(faculty, departments, 2005, rng, params=NO_EXTRA_OPENINGS)

    assert result.openings[DEPT_OPENINGS].tolist() == [3, 2, 0, 0]
    # retirees are never also counted as movers
    assert (result.faculty[FAC_STATUS] == "retiring").all()


def test_recession_suppresses_growth_openings(departments):
    faculty = empty_frame(FACULTY_COLS, FACULTY_DTYPES)
    params = build_params(growth_openings_lambda=50.0, baseline_openings_lambda=0.0)

    in_recession = generate_job_openings(faculty, departments, 2009, np.random.default_rng(1), params=params)
    normal = generate_job_openings(faculty, departments, 2005, np.random.default_rng(1), params=params)

    assert in_recession.openings[DEPT_OPENINGS].sum() == 0
    assert normal.openings[DEPT_OPENINGS].sum() > 0


def test_disabled_recession_behaves_like_normal_year(departments, faculty):
    gated = generate_job_openings(
        faculty, departments, 2009, np.random.default_rng(5), apply_recession=False
    )
    normal = generate_job_openings(faculty, departments, 2005, np.random.default_rng(5))

    pd.testing.assert_frame_equal(gated.openings, normal.openings)
    pd.testing.assert_frame_equal(gated.faculty, normal.faculty)


def test_duplicate_department_ids_raise(rng, departments, faculty):
    dupes = pd.concat([departments, departments.iloc[[0]]], ignore_index=True)
    with pytest.raises(InvariantViolationError):
        generate_job_openings(faculty, dupes, 2005, rng)


def test_faculty_in_unknown_department_raise(rng, departments):
    faculty = create_faculty_members(2, rng, department_id=999)
    with pytest.raises(InvariantViolationError):
        generate_job_openings(faculty, departments, 2005, rng)


def test_merge_openings_keeps_department_order(departments):
    openings = pd.DataFrame({DEPT_ID: departments[DEPT_ID][::-1].to_numpy(), DEPT_OPENINGS: [4, 3, 2, 1]})
    merged = merge_openings(departments, openings, 2005)

    assert merged[DEPT_ID].tolist() == departments[DEPT_ID].tolist()
    assert merged[DEPT_OPENINGS].tolist() == [1, 2, 3, 4]


def test_merge_openings_missing_department_raise(departments):
    openings = pd.DataFrame({DEPT_ID: departments[DEPT_ID].iloc[:3].to_numpy(), DEPT_OPENINGS: [1, 1, 1]})
    with pytest.raises(InvariantViolationError):
        merge_openings(departments, openings, 2005)


def test_merge_openings_duplicate_rows_raise(departments):
    ids = departments[DEPT_ID].tolist() + [departments[DEPT_ID].iloc[0]]
    openings = pd.DataFrame({DEPT_ID: ids, DEPT_OPENINGS: [1] * len(ids)})
    with pytest.raises(InvariantViolationError):
        merge_openings(departments, openings, 2005)
