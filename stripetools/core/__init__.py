"""Core Layer: command handling between the CLI and the payment gateway."""
