"""
Common Utilities for Document Usage Examples

Console helpers shared by the usage examples.
"""

from typing import Any, List

from document_operations import ResultEnvelope


def print_section(title: str, width: int = 60):
    """
    Print a formatted section header.

    Args:
        title: Section title
        width: Width of the header line
    """
    print("\n" + "=" * width)
    print(f" {title}")
    print("=" * width)


def print_step(step_num: int, description: str):
    print(f"\n[Step {step_num}] {description}")


def print_success(message: str):
    """Print a success message."""
    print(f"[SUCCESS] {message}")


def print_error(message: str):
    """Print an error message."""
    print(f"[ERROR] {message}")


def print_info(key: str, value: Any):
    """Print information in key-value format."""
    print(f"  - {key}: {value}")


def print_envelope(label: str, envelope: ResultEnvelope, max_body: int = 120):
    """Print the outcome of one document operation."""
    if envelope.has_error:
        print_error(f"{label}: {envelope.status.name} ({envelope.error_kind.value}) {envelope.error_message}")
        return
    body = envelope.body if len(envelope.body) <= max_body else envelope.body[:max_body] + "..."
    print_success(f"{label}: {envelope.status.name}")
    print_info("Body", body or "<empty>")
    print_info("Self link", envelope.self_link)
    if envelope.continuation_token:
        print_info("Continuation token", envelope.continuation_token)


def print_batch(label: str, envelopes: List[ResultEnvelope]):
    """Print the outcomes of a batch operation, one line per item."""
    print_info(label, f"{len(envelopes)} results")
    for index, envelope in enumerate(envelopes):
        print_envelope(f"{label}[{index}]", envelope)
