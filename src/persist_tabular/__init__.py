"""
persist_tabular
===============

Delimited tabular export with inferred relational schema and deterministic ids.
"""

from .export import (
    TabularWriter,
    PersistPropsTransformContext,
    GuessColumnDefn,
    ExplicitColumnDefn,
    compose_transforms,
    create_id,
    derive_namespace,
)

__all__ = [
    "TabularWriter",
    "PersistPropsTransformContext",
    "GuessColumnDefn",
    "ExplicitColumnDefn",
    "compose_transforms",
    "create_id",
    "derive_namespace",
]
