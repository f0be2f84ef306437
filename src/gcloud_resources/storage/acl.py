"""Predefined (canned) access control rules for buckets and files."""

# Accepted spellings of each predefined rule, mapped to the API value
PREDEFINED_RULES = {
    "authenticatedRead": "authenticatedRead",
    "auth": "authenticatedRead",
    "auth_read": "authenticatedRead",
    "authenticated": "authenticatedRead",
    "authenticated_read": "authenticatedRead",
    "bucketOwnerFullControl": "bucketOwnerFullControl",
    "owner_full": "bucketOwnerFullControl",
    "bucketOwnerRead": "bucketOwnerRead",
    "owner_read": "bucketOwnerRead",
    "private": "private",
    "projectPrivate": "projectPrivate",
    "project_private": "projectPrivate",
    "publicRead": "publicRead",
    "public": "publicRead",
    "public_read": "publicRead",
    "publicReadWrite": "publicReadWrite",
    "public_write": "publicReadWrite",
}


def predefined_rule_for(rule_name: object) -> str | None:
    """Map a predefined rule alias (e.g. "public", "owner_full") to its API name.

    Returns:
        The API value, or None for None and unrecognized names.
    """
    if rule_name is None:
        return None
    return PREDEFINED_RULES.get(str(rule_name))
