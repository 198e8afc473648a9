"""End-to-end tests for the example log-in form.

The form is the reference consumer: two independent fields combined only
at submission time.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from fieldstate.examples import login_form
from fieldstate.examples.login_form import LogInForm, main
from fieldstate.lib.errors import ConfigurationError, DuplicateValidatorError
from fieldstate.lib.settings import SETTINGS_FILENAME
from fieldstate.lib.validator_set import DuplicatePolicy
from fieldstate.lib.validators import min_length, one_of


@pytest.fixture
def submissions():
    return []


@pytest.fixture
def form(submissions) -> LogInForm:
    return LogInForm(lambda username, password: submissions.append((username, password)))


class TestLogInForm:
    """Submission gating across two fields."""

    def test_fresh_form_shows_no_errors(self, form: LogInForm) -> None:
        assert form.username.valid is False
        assert form.password.valid is False
        assert form.error_messages() == {}

    def test_empty_submit_is_blocked(self, form: LogInForm, submissions) -> None:
        assert form.submit() is False

        assert submissions == []
        assert form.username.error is True
        assert form.password.error is True
        assert form.error_messages() == {
            "username": "Username is required",
            "password": "Password is required",
        }

    def test_partial_submit_is_blocked(self, form: LogInForm, submissions) -> None:
        form.username.set("alice")

        assert form.submit() is False

        assert submissions == []
        assert form.username.error is False
        assert form.error_messages() == {"password": "Password is required"}

    def test_valid_submit(self, form: LogInForm, submissions) -> None:
        form.username.set("alice")
        form.password.set("secret")

        assert form.submit() is True

        assert submissions == [("alice", "secret")]
        assert form.username.touched is True
        assert form.password.touched is True

    def test_blur_before_typing_shows_error(self, form: LogInForm) -> None:
        """Leaving an empty field flags it; typing clears the flag."""
        form.username.touch()
        assert form.error_messages() == {"username": "Username is required"}

        form.username.set("a")
        assert form.error_messages() == {}

    def test_whitespace_only_blocked_by_default(self, form: LogInForm, submissions) -> None:
        form.username.set("   ")
        form.password.set("secret")
        assert form.submit() is False
        assert submissions == []

    def test_whitespace_allowed_without_stripping(self, submissions) -> None:
        form = LogInForm(lambda u, p: submissions.append((u, p)), strip_whitespace=False)
        form.username.set("   ")
        form.password.set("secret")
        assert form.submit() is True
        assert submissions == [("   ", "secret")]

    def test_reset_clears_everything(self, form: LogInForm) -> None:
        form.username.set("alice")
        form.submit()
        form.reset()

        for field in form.fields.values():
            assert field.value == ""
            assert field.dirty is False
            assert field.touched is False
        assert form.error_messages() == {}

    def test_blocked_submission_logged(self, form: LogInForm, caplog) -> None:
        with caplog.at_level(logging.INFO, logger="fieldstate.examples.login_form"):
            form.submit()

        record = caplog.records[-1]
        assert record.getMessage() == "Submission blocked"
        assert record.form == "login"
        assert record.errors == ["password", "username"]

    def test_invalid_fields_logged_without_values(self, form: LogInForm, caplog) -> None:
        form.username.set("alice")
        form.password.set("   ")

        with caplog.at_level(logging.INFO, logger="fieldstate.examples.login_form"):
            form.submit()

        blocked = [r for r in caplog.records if r.getMessage() == "Field blocked submission"]
        assert len(blocked) == 1
        assert blocked[0].field == "password"
        assert blocked[0].form == "login"
        assert blocked[0].failed == ["required"]
        assert blocked[0].touched is True
        assert "alice" not in caplog.text


class TestExtraRules:
    """Per-field extra validators and the duplicate-name policy."""

    def test_extra_rule_appended(self, submissions) -> None:
        form = LogInForm(
            lambda u, p: submissions.append((u, p)),
            extra_rules={"password": {"min_length": min_length(8)}},
        )
        assert form.password.validators.names == ["required", "min_length"]
        assert form.username.validators.names == ["required"]

        form.username.set("alice")
        form.password.set("short")
        assert form.submit() is False
        assert form.error_messages() == {"password": "Password is too short"}

    def test_unknown_rule_message(self) -> None:
        form = LogInForm(
            lambda u, p: None,
            extra_rules={"username": {"allowed": one_of(["alice"])}},
        )
        form.username.set("mallory")
        form.username.touch()
        assert form.error_messages() == {"username": "Username is invalid"}

    def test_collision_rejected_by_default(self) -> None:
        with pytest.raises(DuplicateValidatorError) as exc_info:
            LogInForm(lambda u, p: None, extra_rules={"username": {"required": min_length(3)}})
        assert exc_info.value.field == "username"

    def test_collision_last_wins(self, submissions) -> None:
        form = LogInForm(
            lambda u, p: submissions.append((u, p)),
            on_duplicate=DuplicatePolicy.LAST_WINS,
            extra_rules={"username": {"required": min_length(3)}},
        )
        assert form.username.validators.names == ["required"]

        form.username.set("al")
        form.password.set("secret")
        assert form.submit() is False
        assert form.error_messages() == {"username": "Username is required"}

    def test_unknown_policy(self) -> None:
        with pytest.raises(ConfigurationError, match="Invalid duplicate policy"):
            LogInForm(lambda u, p: None, on_duplicate="first_wins")


class TestMain:
    """Tests for the command-line entry point."""

    @pytest.fixture(autouse=True)
    def isolated(self, clean_env, restore_root_logger, tmp_path: Path):
        clean_env.chdir(tmp_path)
        return tmp_path

    def test_successful_login(self, capsys) -> None:
        assert main(["--username", "alice", "--password", "secret"]) == 0

        out = capsys.readouterr().out
        assert "Logged in with alice/******" in out
        assert "secret" not in out

    def test_blocked_login(self, capsys) -> None:
        assert main(["--username", "alice"]) == 1

        err = capsys.readouterr().err
        assert "Password is required" in err
        assert "Username is required" not in err

    def test_json_logs(self, capsys) -> None:
        assert main(["--json-logs"]) == 1
        out = capsys.readouterr().out
        assert '"message": "Submission blocked"' in out

    def test_settings_file_disables_stripping(self, isolated: Path, capsys) -> None:
        (isolated / SETTINGS_FILENAME).write_text(
            "fieldstate:\n  strip_whitespace: false\n", encoding="utf-8"
        )
        assert main(["--username", " ", "--password", "x"]) == 0

    def test_min_password_length(self, capsys) -> None:
        argv = ["--username", "alice", "--password", "secret", "--min-password-length", "8"]
        assert main(argv) == 1
        assert "Password is too short" in capsys.readouterr().err

    def test_malformed_settings_file(self, isolated: Path, capsys) -> None:
        (isolated / SETTINGS_FILENAME).write_text("fieldstate: [\n", encoding="utf-8")

        assert main(["--username", "alice", "--password", "secret"]) == 1

        captured = capsys.readouterr()
        assert "Could not read settings file" in captured.err
        assert "Logged in" not in captured.out

    def test_invalid_settings_value(self, isolated: Path, capsys) -> None:
        (isolated / SETTINGS_FILENAME).write_text(
            "fieldstate:\n  duplicate_policy: first_wins\n", encoding="utf-8"
        )
        assert main(["--username", "alice", "--password", "secret"]) == 1
        assert "Invalid fieldstate settings" in capsys.readouterr().err

    def test_duplicate_policy_passed_to_form(self, clean_env, capsys) -> None:
        clean_env.setenv("FIELDSTATE_DUPLICATE_POLICY", "last_wins")
        policies = []
        real_form = login_form.LogInForm

        def recording_form(on_submit, **kwargs):
            policies.append(kwargs["on_duplicate"])
            return real_form(on_submit, **kwargs)

        clean_env.setattr(login_form, "LogInForm", recording_form)

        assert main(["--username", "alice", "--password", "secret"]) == 0
        assert policies == [DuplicatePolicy.LAST_WINS]

    def test_json_logs_keep_configured_level(self, clean_env, restore_root_logger, capsys) -> None:
        clean_env.setenv("FIELDSTATE_LOG_LEVEL", "WARNING")

        assert main(["--json-logs"]) == 1

        assert restore_root_logger.level == logging.WARNING
        assert "Submission blocked" not in capsys.readouterr().out

    def test_json_logs_respect_console_setting(
        self, clean_env, restore_root_logger, isolated: Path, capsys
    ) -> None:
        log_file = isolated / "forms.log"
        clean_env.setenv("FIELDSTATE_LOG_CONSOLE", "false")
        clean_env.setenv("FIELDSTATE_LOG_FILE", str(log_file))

        assert main(["--json-logs"]) == 1
        for handler in restore_root_logger.handlers:
            handler.flush()

        assert not any(
            type(handler) is logging.StreamHandler for handler in restore_root_logger.handlers
        )
        assert "Submission blocked" not in capsys.readouterr().out
        assert '"message": "Submission blocked"' in log_file.read_text(encoding="utf-8")

    def test_verbose_overrides_configured_level(self, clean_env, restore_root_logger) -> None:
        clean_env.setenv("FIELDSTATE_LOG_LEVEL", "ERROR")
        main(["--verbose", "--username", "alice", "--password", "secret"])
        assert restore_root_logger.level == logging.DEBUG
