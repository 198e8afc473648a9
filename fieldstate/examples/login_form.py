"""Headless log-in form built from two FieldState instances.

The form shows how a consumer wires fields together: each field is
independent, and the form alone decides that submission requires every
field to be valid.

Usage:
    python -m fieldstate.examples.login_form --username alice --password secret
    python -m fieldstate.examples.login_form --username alice   # blocked
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable, Dict, List, Mapping, Optional, Union

from fieldstate.lib.errors import SettingsError
from fieldstate.lib.logging import configure_logging, get_field_logger, setup_logging
from fieldstate.lib.settings import FieldStateSettings, load_settings
from fieldstate.lib.validator_set import DuplicatePolicy, ValidatorSet, ValidatorSource
from fieldstate.lib.validators import min_length, not_empty, required
from fieldstate.models import FieldState

__all__ = ["LogInForm", "main"]

SubmitCallback = Callable[[str, str], None]

FIELD_LABELS = {
    "username": "Username",
    "password": "Password",
}

# Message for the first failing validator, by validator name
RULE_MESSAGES = {
    "required": "{label} is required",
    "min_length": "{label} is too short",
}
DEFAULT_MESSAGE = "{label} is invalid"


class LogInForm:
    """Username/password form with submit gating.

    Every field starts with a ``required`` rule. ``extra_rules`` appends
    validators per field name; a name that collides with an existing rule is
    resolved by ``on_duplicate``.

    Args:
        on_submit: Called with (username, password) when submission is allowed
        strip_whitespace: Treat whitespace-only input as missing
        on_duplicate: DuplicatePolicy for ``extra_rules`` collisions
        extra_rules: Additional validators keyed by field name

    Raises:
        ConfigurationError: Unknown policy, or a collision under ``reject``
    """

    def __init__(
        self,
        on_submit: SubmitCallback,
        *,
        strip_whitespace: bool = True,
        on_duplicate: Union[str, DuplicatePolicy] = DuplicatePolicy.REJECT,
        extra_rules: Optional[Mapping[str, ValidatorSource]] = None,
    ) -> None:
        rule = required if strip_whitespace else not_empty
        extra_rules = extra_rules or {}

        def build(name: str) -> FieldState[str]:
            rules = ValidatorSet({"required": rule}, field=name).merge(
                extra_rules.get(name, {}), on_duplicate=on_duplicate, field=name
            )
            return FieldState("", rules, name=name)

        self.on_submit = on_submit
        self.username = build("username")
        self.password = build("password")
        self._log = get_field_logger(__name__, form="login")

    @property
    def fields(self) -> Dict[str, FieldState[str]]:
        return {"username": self.username, "password": self.password}

    @property
    def valid(self) -> bool:
        return all(field.valid for field in self.fields.values())

    def submit(self) -> bool:
        """Touch every field, then call on_submit only if all are valid.

        Fields are touched first because they may never have been edited;
        validity is checked with ``valid``, not ``error``, since ``error`` is
        False for untouched fields.
        """
        for field in self.fields.values():
            field.touch()

        if not self.valid:
            for field in self.fields.values():
                if not field.valid:
                    self._log.log_field("Field blocked submission", field)
            self._log.info("Submission blocked", extra={"errors": sorted(self.error_messages())})
            return False

        self.on_submit(self.username.value, self.password.value)
        self._log.info("Submitted")
        return True

    def reset(self) -> None:
        for field in self.fields.values():
            field.reset()

    def error_messages(self) -> Dict[str, str]:
        """Messages for fields that should currently display an error."""
        return {name: _message(name, field) for name, field in self.fields.items() if field.error}


def _message(name: str, field: FieldState[str]) -> str:
    failed = [rule for rule, passed in field.validation.items() if not passed]
    template = RULE_MESSAGES.get(failed[0], DEFAULT_MESSAGE) if failed else DEFAULT_MESSAGE
    return template.format(label=FIELD_LABELS[name])


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Submit the example log-in form once",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Successful submission
    python -m fieldstate.examples.login_form --username alice --password secret

    # Blocked submission with JSON logs
    python -m fieldstate.examples.login_form --username alice --json-logs

    # Require passwords of at least 8 characters
    python -m fieldstate.examples.login_form --username alice --password secret --min-password-length 8
        """,
    )
    parser.add_argument("--username", default=None, help="Value typed into the username field")
    parser.add_argument("--password", default=None, help="Value typed into the password field")
    parser.add_argument(
        "--min-password-length",
        type=int,
        default=None,
        help="Add a min_length rule to the password field",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log records")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Run one submission of the form.

    Returns:
        0 when the form was submitted, 1 when submission was blocked or the
        settings file could not be loaded.
    """
    args = _parse_args(argv)

    try:
        settings: FieldStateSettings = load_settings()
    except SettingsError as e:
        print(str(e), file=sys.stderr)
        return 1

    if args.verbose or args.json_logs:
        setup_logging(
            json_format=args.json_logs or settings.log_format == "json",
            log_file=settings.log_file,
            console=settings.log_console,
            level=logging.DEBUG if args.verbose else logging.getLevelName(settings.log_level),
        )
    else:
        configure_logging(settings.logging_config())

    def on_submit(username: str, password: str) -> None:
        print(f"Logged in with {username}/{'*' * len(password)}")

    extra_rules: Dict[str, ValidatorSource] = {}
    if args.min_password_length is not None:
        extra_rules["password"] = {"min_length": min_length(args.min_password_length)}

    form = LogInForm(
        on_submit,
        strip_whitespace=settings.strip_whitespace,
        on_duplicate=settings.duplicate_policy,
        extra_rules=extra_rules,
    )

    # Simulate the user editing and leaving each supplied field
    for name, value in (("username", args.username), ("password", args.password)):
        if value is not None:
            field = form.fields[name]
            field.set(value)
            field.touch()

    if form.submit():
        return 0

    for message in form.error_messages().values():
        print(message, file=sys.stderr)
    return 1


if __name__ == "__main__":
    sys.exit(main())
