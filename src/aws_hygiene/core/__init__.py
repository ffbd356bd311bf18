"""Core AWS hygiene modules: constants, data models and AWS helpers.

Submodules are imported directly (``aws_hygiene.core.models``,
``aws_hygiene.core.aws``) so that the logging utilities can depend on
``aws_hygiene.core.constants`` without an import cycle.
"""
