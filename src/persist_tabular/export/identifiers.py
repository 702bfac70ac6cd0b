"""
Deterministic Identifiers
=========================

Name-based (UUID v5) id derivation.

Namespaces compose hierarchically:

    parent namespace -> file namespace -> row-local id

The same (parent namespace, file name, local name) triple always yields the
same id, in every run and every process. No registry, no randomness.
"""

import uuid

from .errors import InvalidNamespaceError


UUID = str


def as_namespace(namespace: uuid.UUID | str) -> uuid.UUID:
    """
    Coerce a namespace value to uuid.UUID.

    Raises:
        InvalidNamespaceError: If a string namespace is not a valid UUID.
    """
    if isinstance(namespace, uuid.UUID):
        return namespace
    try:
        return uuid.UUID(str(namespace))
    except ValueError as e:
        raise InvalidNamespaceError(
            f"Namespace '{namespace}' is not a valid UUID."
        ) from e


def derive_namespace(name: str, parent_namespace: uuid.UUID | str) -> uuid.UUID:
    """Derive a child namespace for `name` under `parent_namespace`."""
    return uuid.uuid5(as_namespace(parent_namespace), name)


def create_id(name: str, namespace: uuid.UUID | str) -> UUID:
    """
    Create a deterministic id for `name` within `namespace`.

    Args:
        name: Local name of the record (e.g. its natural key).
        namespace: Namespace the id belongs to.

    Returns:
        Canonical string form of the UUID v5.
    """
    return str(derive_namespace(name, namespace))
