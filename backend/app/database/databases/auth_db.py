"""
Auth database collections.
Stores user identity and credentials.
"""


class Collections:
    """Collection names in the auth database."""
    USERS = "users"

    # Index definitions for each collection
    INDEXES = {
        "users": [
            {"keys": [("email", 1)], "unique": True},
            {"keys": [("metadata.status", 1)]},
        ],
    }


# Manifest for registry
DB_MANIFEST = {
    "purpose": "User authentication and identity management",
    "collections": [Collections.USERS],
    "indexes": Collections.INDEXES,
}
