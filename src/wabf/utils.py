import logging

from wabf.config import JID_SUFFIX, LINK_PREFIX

logger = logging.getLogger(__name__)


def clean_number(phone_number: str) -> str:
    """Drop spaces and '+' from a phone number."""
    return phone_number.replace(" ", "").replace("+", "")


def format_link(phone_number: str) -> str:
    return LINK_PREFIX + clean_number(phone_number)


def format_identifier(phone_number: str, output_format: str) -> str:
    """
    Format a found number for the link list output.

    Args:
        phone_number: Candidate digit string
        output_format: One of 'wa.me', 'jid', 'pn'

    Returns:
        str: Formatted identifier; unknown formats fall back to the wa.me link
    """
    pn = clean_number(phone_number)
    if output_format == "jid":
        return pn + JID_SUFFIX
    if output_format == "pn":
        return pn
    if output_format != "wa.me":
        logger.debug(f"Unknown output format '{output_format}', using wa.me")
    return format_link(pn)


def confirm_action(message: str, default: bool = False) -> bool:
    """
    Ask user for confirmation.

    Args:
        message: Confirmation message
        default: Default choice if user just presses Enter

    Returns:
        bool: True if user confirms, False otherwise
    """
    suffix = "[Y/n]" if default else "[y/N]"
    try:
        response = input(f"{message} {suffix}: ").strip().lower()

        if not response:  # Empty response, use default
            return default

        return response in ('y', 'yes')
    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        return False
    except EOFError:
        return default


def format_duration(seconds: int) -> str:
    """
    Format duration in human-readable format.

    Args:
        seconds: Duration in seconds

    Returns:
        str: Formatted duration string
    """
    if seconds < 60:
        return f"{seconds}s"
    elif seconds < 3600:
        minutes = seconds // 60
        remaining_seconds = seconds % 60
        return f"{minutes}m {remaining_seconds}s"
    else:
        hours = seconds // 3600
        remaining_minutes = (seconds % 3600) // 60
        return f"{hours}h {remaining_minutes}m"


def estimate_duration(total_items: int, delay: float, jitter: float, threads: int = 1) -> int:
    """
    Rough lower bound on scan time in seconds.

    Each worker waits delay plus half the jitter on average before every
    lookup; network time is not included.
    """
    per_item = delay + jitter / 2.0
    return int(total_items * per_item / max(1, threads))
