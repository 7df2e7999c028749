import pytest

from testlink_builder.models import ExecutionStatus, Report, TestCase
from tests.fakes import make_wrapper


def test_execution_status_from_code():
    assert ExecutionStatus.from_code("p") == ExecutionStatus.PASSED
    assert ExecutionStatus.from_code("b") == ExecutionStatus.BLOCKED
    assert ExecutionStatus.from_code("x") == ExecutionStatus.NOT_RUN


@pytest.mark.parametrize("statuses", [
    [],
    [ExecutionStatus.PASSED],
    [ExecutionStatus.FAILED, ExecutionStatus.FAILED, ExecutionStatus.NOT_RUN],
    [ExecutionStatus.BLOCKED, ExecutionStatus.PASSED, ExecutionStatus.FAILED, ExecutionStatus.NOT_RUN],
])
def test_report_total_is_sum_of_counters(test_project, test_plan, statuses):
    report = Report(test_project, test_plan, 1, "b")
    for i, status in enumerate(statuses):
        report.add_test_case(make_wrapper(i, status=status))

    assert report.tests_total == len(statuses)
    assert report.tests_total == report.passed + report.failed + report.blocked + report.not_run
    assert report.failed == statuses.count(ExecutionStatus.FAILED)


def test_report_from_test_cases(test_project, test_plan, testlink_build):
    wrappers = [make_wrapper(1, status=ExecutionStatus.PASSED), make_wrapper(2)]

    report = Report.from_test_cases(test_project, test_plan, testlink_build, wrappers)

    assert report.build_id == 7
    assert report.build_name == "My build"
    assert report.passed == 1
    assert report.not_run == 1
    assert report.test_cases == wrappers


def test_test_case_from_execution_row():
    row = {
        "tcase_id": "4",
        "tcase_name": "login",
        "full_external_id": "T-1",
        "version": "2",
        "tcversion_id": "5",
        "execution_order": "1000",
        "platform_id": "0",
        "platform_name": "",
        "exec_status": "n",
    }

    test_case = TestCase.from_execution(row)

    assert test_case.id == 4
    assert test_case.name == "login"
    assert test_case.full_external_id == "T-1"
    assert test_case.version == 2
    assert test_case.version_id == 5
    assert test_case.execution_order == 1000
    assert test_case.execution_status == ExecutionStatus.NOT_RUN


def test_test_case_from_execution_row_without_full_external_id():
    test_case = TestCase.from_execution({"tc_id": "3", "prefix": "PRJ", "external_id": "12"})

    assert test_case.id == 3
    assert test_case.full_external_id == "PRJ-12"


def test_wrapper_custom_field_and_notes():
    wrapper = make_wrapper(1, custom_fields={"Java Class": "com.example.LoginTest"})

    assert wrapper.get_key_custom_field_value("Java Class") == "com.example.LoginTest"
    assert wrapper.get_key_custom_field_value("Other") is None

    wrapper.append_notes("first")
    wrapper.append_notes("")
    wrapper.append_notes("second")
    assert wrapper.notes == "first\nsecond"


def test_wrapper_status_is_shared_with_test_case():
    wrapper = make_wrapper(1)
    wrapper.execution_status = ExecutionStatus.BLOCKED

    assert wrapper.test_case.execution_status == ExecutionStatus.BLOCKED
