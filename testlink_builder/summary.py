"""Résumé HTML d'un rapport TestLink, affiché dans l'interface web."""

from .models import ExecutionStatus

STATUS_LABELS = {
    ExecutionStatus.PASSED: "<span style='color: green'>Passed</span>",
    ExecutionStatus.FAILED: "<span style='color: red'>Failed</span>",
    ExecutionStatus.BLOCKED: "<span style='color: yellow'>Blocked</span>",
}
NOT_RUN_LABEL = "<span style='color: gray'>Not Run</span>"


def get_plus_signal(current, previous):
    if current > previous:
        return f" (+{current - previous})"
    return ""


def create_report_summary(report, previous=None):
    """Résumé HTML du build, avec les écarts par rapport au build précédent."""
    total = report.tests_total
    passed = report.passed
    failed = report.failed
    blocked = report.blocked
    not_run = report.not_run

    if previous is not None:
        total_plus = get_plus_signal(total, previous.tests_total)
        passed_plus = get_plus_signal(passed, previous.passed)
        failed_plus = get_plus_signal(failed, previous.failed)
        blocked_plus = get_plus_signal(blocked, previous.blocked)
        not_run_plus = get_plus_signal(not_run, previous.not_run)
    else:
        total_plus = passed_plus = failed_plus = blocked_plus = not_run_plus = ""

    return (
        f"<p><b>TestLink build ID: {report.build_id}</b></p>"
        f"<p><b>TestLink build name: {report.build_name}</b></p>"
        f"<p><a href=\"testLinkResult\">Total of {total}{total_plus} tests</a>. "
        f"Where {passed}{passed_plus} passed, {failed}{failed_plus} failed, "
        f"{blocked}{blocked_plus} were blocked and "
        f"{not_run}{not_run_plus} were not executed.</p>"
    )


def _union_test_cases(report, previous):
    test_cases = list(report.test_cases)
    if previous is None:
        return test_cases
    seen = {tc.id for tc in test_cases}
    for tc in previous.test_cases:
        if tc.id not in seen:
            seen.add(tc.id)
            test_cases.append(tc)
    return test_cases


def create_report_summary_details(report, previous=None):
    """Table HTML des cas de test du build (et de ceux du build précédent)."""
    project = report.test_project
    plan = report.test_plan
    parts = [
        f"<p>List of test cases and execution result status for "
        f"Project: {project.name} (id:{project.id}) "
        f"Test Plan: {plan.name} (id:{plan.id})</p>",
        "<table border=\"1\">\n",
        "<tr><th>Test case ID</th><th>Test case external ID</th><th>Version</th>"
        "<th>Name</th><th>Test Suite</th><th>Execution status</th></tr>\n",
    ]
    for tc in _union_test_cases(report, previous):
        label = STATUS_LABELS.get(tc.execution_status, NOT_RUN_LABEL)
        parts.append(
            "<tr>\n"
            f"<td>{tc.id}</td><td>{tc.full_external_id}</td><td>{tc.version}</td>"
            f"<td>{tc.name}</td><td>{tc.test_suite_name} (id:{tc.test_suite_id})</td>"
            f"<td>{label}</td>\n"
            "</tr>\n"
        )
    parts.append("</table>")
    return "".join(parts)
