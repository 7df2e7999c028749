from testlink_builder.helper import (
    build_test_case_env_vars,
    expand_variable,
    format_custom_field_env_var_name,
    split_custom_fields,
)
from tests.fakes import make_wrapper


def test_build_test_case_env_vars(test_project, test_plan, testlink_build):
    wrapper = make_wrapper(42, name="login", execution_order=3, suite_id=10, suite_name="Auth",
                           custom_fields={"Java Class": "com.example.LoginTest", "tags": None})
    wrapper.platform = "Linux"

    env = build_test_case_env_vars(wrapper, test_project, test_plan, testlink_build)

    assert env["TESTLINK_TESTCASE_ID"] == "42"
    assert env["TESTLINK_TESTCASE_NAME"] == "login"
    assert env["TESTLINK_TESTCASE_EXTERNALID"] == "T-42"
    assert env["TESTLINK_TESTCASE_TESTPROJECTID"] == "123"
    assert env["TESTLINK_TESTCASE_TESTSUITEID"] == "10"
    assert env["TESTLINK_TESTCASE_TESTSUITE_NAME"] == "Auth"
    assert env["TESTLINK_TESTCASE_EXECUTIONORDER"] == "3"
    assert env["TESTLINK_TESTCASE_PLATFORM"] == "Linux"
    assert env["TESTLINK_TESTCASE_JAVA_CLASS"] == "com.example.LoginTest"
    assert env["TESTLINK_TESTCASE_TAGS"] == ""
    assert env["TESTLINK_TESTPROJECT_NAME"] == "test project"
    assert env["TESTLINK_TESTPLAN_ID"] == "1234"
    assert env["TESTLINK_BUILD_ID"] == "7"
    assert env["TESTLINK_BUILD_NAME"] == "My build"
    assert all(isinstance(v, str) for v in env.values())


def test_format_custom_field_env_var_name():
    assert format_custom_field_env_var_name("java-class") == "TESTLINK_TESTCASE_JAVA_CLASS"


def test_expand_variable():
    env = {"VERSION": "1.2", "BUILD_NUMBER": "5"}

    assert expand_variable("release ${VERSION} #$BUILD_NUMBER", env) == "release 1.2 #5"
    assert expand_variable("keep $UNKNOWN", env) == "keep $UNKNOWN"
    assert expand_variable("", env) == ""
    assert expand_variable(None, env) is None


def test_split_custom_fields():
    assert split_custom_fields(" class, ,method,${EXTRA} ", {"EXTRA": "tags"}) == ["class", "method", "tags"]
    assert split_custom_fields("") == []
    assert split_custom_fields(None) == []
