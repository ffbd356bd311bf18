"""AWS hygiene tools: small jobs that keep an AWS account tidy."""

__version__ = "1.0.0"
