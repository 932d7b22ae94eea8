"""Attribute path handling shared by plugin declarations and the provides map."""

from hostfacts.exceptions import AttributeSyntaxError


def normalize_attribute(attribute: str) -> list[str]:
    """
    Split an attribute path like ``kernel/modules`` into its parts.

    A single leading slash is tolerated and dropped.

    Raises:
        AttributeSyntaxError: If the path is empty, contains ``//`` or ends
            with ``/``
    """
    if not isinstance(attribute, str) or not attribute.strip("/"):
        raise AttributeSyntaxError(f"Attribute is empty: {attribute!r}")
    if "//" in attribute:
        raise AttributeSyntaxError(
            f"Attribute contains duplicate '/' characters: {attribute}"
        )
    if attribute.endswith("/"):
        raise AttributeSyntaxError(f"Attribute contains a trailing '/': {attribute}")

    return attribute.lstrip("/").split("/")
