import pytest

from testlink_builder.host import Build, BuildListener
from testlink_builder.models import TestLinkBuild, TestPlan, TestProject
from tests.fakes import FakeTestLinkAPI


@pytest.fixture
def test_project():
    return TestProject(123, "test project")


@pytest.fixture
def test_plan():
    return TestPlan(1234, "test plan")


@pytest.fixture
def testlink_build():
    return TestLinkBuild(7, "My build")


@pytest.fixture
def build(tmp_path):
    return Build("my-job", 1, tmp_path, environment={"PATH": "/usr/bin:/bin", "VERSION": "1.2"})


@pytest.fixture
def listener(build):
    listener = BuildListener(build)
    yield listener
    listener.close()


@pytest.fixture
def fake_api():
    return FakeTestLinkAPI()
