"""
Result seekers: scan the workspace after the build steps and set the status
of each automated test case from the result files.
"""

import logging
import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod

from rapidfuzz import fuzz, process, utils

from .errors import ResultSeekerError
from .models import Attachment, ExecutionStatus

logger = logging.getLogger(__name__)

# worst status wins when several results match the same test case
_SEVERITY = {
    ExecutionStatus.NOT_RUN: 0,
    ExecutionStatus.PASSED: 1,
    ExecutionStatus.BLOCKED: 2,
    ExecutionStatus.FAILED: 3,
}


class ResultSeeker(ABC):

    def __init__(self, include_pattern, key_custom_field, attach_junit_xml=False,
                 similarity_cutoff=None):
        self.include_pattern = include_pattern
        self.key_custom_field = key_custom_field
        self.attach_junit_xml = attach_junit_xml
        self.similarity_cutoff = similarity_cutoff

    @property
    def display_name(self):
        return type(self).__name__

    @abstractmethod
    def seek(self, test_cases, build, launcher, listener, site):
        """Updates the status of test_cases and reports them to TestLink."""

    def scan(self, build):
        files = sorted(p for p in build.workspace.glob(self.include_pattern) if p.is_file())
        logger.debug(f"{self.display_name} found {len(files)} file(s) for {self.include_pattern}")
        return files

    def parse(self, path):
        try:
            return ET.parse(path).getroot()
        except (ET.ParseError, OSError) as e:
            raise ResultSeekerError(f"Failed to parse JUnit report {path}: {e}") from e

    def find_test_cases(self, name, test_cases):
        """Test cases whose key custom field matches a result name."""
        keyed = [(tc, tc.get_key_custom_field_value(self.key_custom_field)) for tc in test_cases]
        keyed = [(tc, value) for tc, value in keyed if value]
        if self.similarity_cutoff is None:
            return [tc for tc, value in keyed if value == name]

        best_match = process.extractOne(
            name,
            [value for _, value in keyed],
            scorer=fuzz.token_sort_ratio,
            processor=utils.default_process,
            score_cutoff=self.similarity_cutoff,
        )
        if not best_match:
            return []
        return [tc for tc, value in keyed if value == best_match[0]]

    def update(self, test_case, status, notes, path):
        if _SEVERITY[status] > _SEVERITY[test_case.execution_status]:
            test_case.execution_status = status
        test_case.append_notes(notes)
        if self.attach_junit_xml:
            test_case.add_attachment(Attachment(str(path), title=path.name,
                                                description="JUnit report"))

    def report(self, updated, listener, site):
        for test_case in updated:
            listener.info(f"Test case {test_case.full_external_id} ({test_case.name}): "
                          f"{test_case.execution_status.name}")
            site.update_test_case(test_case)


def _junit_status(testcase_elem):
    """Status and notes of a JUnit <testcase>."""
    messages = []
    for tag in ("failure", "error"):
        for elem in testcase_elem.findall(tag):
            messages.append((elem.get("message") or elem.text or tag).strip())
    if messages:
        return ExecutionStatus.FAILED, "\n".join(messages)
    if testcase_elem.find("skipped") is not None:
        return ExecutionStatus.BLOCKED, "Skipped"
    return ExecutionStatus.PASSED, ""


class JUnitCaseNameResultSeeker(ResultSeeker):
    """Matches each JUnit <testcase name> with the key custom field."""

    def seek(self, test_cases, build, launcher, listener, site):
        updated = []
        for path in self.scan(build):
            root = self.parse(path)
            for testcase_elem in root.iter("testcase"):
                name = testcase_elem.get("name")
                if not name:
                    continue
                status, notes = _junit_status(testcase_elem)
                for test_case in self.find_test_cases(name, test_cases):
                    self.update(test_case, status, notes, path)
                    if test_case not in updated:
                        updated.append(test_case)
        self.report(updated, listener, site)


class JUnitSuiteNameResultSeeker(ResultSeeker):
    """Matches each JUnit <testsuite name> with the key custom field."""

    def seek(self, test_cases, build, launcher, listener, site):
        updated = []
        for path in self.scan(build):
            root = self.parse(path)
            for suite_elem in root.iter("testsuite"):
                name = suite_elem.get("name")
                if not name:
                    continue
                status = ExecutionStatus.PASSED
                notes = []
                for testcase_elem in suite_elem.iter("testcase"):
                    case_status, case_notes = _junit_status(testcase_elem)
                    if _SEVERITY[case_status] > _SEVERITY[status]:
                        status = case_status
                    if case_notes and case_status == ExecutionStatus.FAILED:
                        notes.append(f"{testcase_elem.get('name')}: {case_notes}")
                for test_case in self.find_test_cases(name, test_cases):
                    self.update(test_case, status, "\n".join(notes), path)
                    if test_case not in updated:
                        updated.append(test_case)
        self.report(updated, listener, site)


SEEKERS = {
    "junit-case-name": JUnitCaseNameResultSeeker,
    "junit-suite-name": JUnitSuiteNameResultSeeker,
}


def result_seeker_from_dict(data):
    seeker_type = data.get("type", "junit-case-name")
    try:
        seeker_class = SEEKERS[seeker_type]
    except KeyError:
        raise ValueError(f"Unknown result seeker type: {seeker_type}")
    return seeker_class(
        data.get("include_pattern", "**/TEST-*.xml"),
        data["key_custom_field"],
        attach_junit_xml=data.get("attach_junit_xml", False),
        similarity_cutoff=data.get("similarity_cutoff"),
    )
