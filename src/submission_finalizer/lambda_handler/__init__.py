"""Lambda entry point for SNS-triggered submission finalization."""
