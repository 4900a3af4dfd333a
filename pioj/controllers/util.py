"""Helpers for controllers."""

from wtforms import Form


def describe_errors(form: Form) -> str:
    """Flatten form validation errors into a single message."""
    return '; '.join(f'{field}: {" ".join(messages)}'
                     for field, messages in form.errors.items())
