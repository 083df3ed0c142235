"""
Schema versions and data migrations between them.
"""

from __future__ import annotations

import logging
from collections.abc import Hashable
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable

from .errors import Issue, ValidationError
from .result import Err, Result
from .schema import Schema

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SchemaVersion:
    version: Hashable
    schema: Schema
    deprecated_fields: tuple[str, ...] = ()
    new_fields: tuple[str, ...] = ()
    created_at: datetime | None = None


def _failure(message: str, code: str, params: dict[str, Any] | None = None) -> Err[ValidationError]:
    return Err(ValidationError([Issue((), message, code, params)]))


@dataclass(frozen=True, slots=True)
class Migration:
    """
    Conversion of data valid under ``source`` into data valid under ``target``.
    """

    source: SchemaVersion
    target: SchemaVersion
    fn: Callable[[Any], Any]

    @property
    def source_version(self) -> Hashable:
        return self.source.version

    @property
    def target_version(self) -> Hashable:
        return self.target.version

    @property
    def deprecated_fields(self) -> tuple[str, ...]:
        return self.source.deprecated_fields

    @property
    def new_fields(self) -> tuple[str, ...]:
        return self.target.new_fields

    def migrate(self, data: Any) -> Result:
        checked = self.source.schema.safe_parse(data)
        if isinstance(checked, Err):
            return _failure(
                f"Source data does not conform to version {self.source_version}: "
                f"{checked.error.message}",
                "migration.invalid_source",
                {"issues": checked.error.to_dicts()},
            )

        try:
            migrated = self.fn(checked.value)
        except Exception as e:
            logger.debug(
                "Migration %s -> %s raised: %r", self.source_version, self.target_version, e
            )
            return _failure(f"Migration failed: {e}", "migration.failed", {"error": repr(e)})

        result = self.target.schema.safe_parse(migrated)
        if isinstance(result, Err):
            return _failure(
                f"Migrated data does not conform to version {self.target_version}: "
                f"{result.error.message}",
                "migration.invalid_target",
                {"issues": result.error.to_dicts()},
            )
        return result


class VersionRegistry:
    """
    Registry of schema versions and the migrations defined between them.

    Example:
        registry = create_version_registry()
        registry.register(SchemaVersion(1, user_v1))
        registry.register(SchemaVersion(2, user_v2, new_fields=("email",)))
        registry.define_migration(1, 2, lambda u: {**u, "email": None})
        registry.migrate({"name": "Ada"}, 1, 2)
    """

    def __init__(self) -> None:
        self._versions: dict[Hashable, SchemaVersion] = {}
        self._migrations: dict[tuple[Hashable, Hashable], Migration] = {}

    def register(self, version: SchemaVersion) -> VersionRegistry:
        self._versions[version.version] = version
        return self

    def define_migration(
        self, source: Hashable, target: Hashable, fn: Callable[[Any], Any]
    ) -> Migration:
        """
        Raises:
            KeyError: either version is not registered
        """
        for version in (source, target):
            if version not in self._versions:
                raise KeyError(f"Schema version {version!r} is not registered")

        migration = Migration(self._versions[source], self._versions[target], fn)
        self._migrations[(source, target)] = migration
        return migration

    def versions(self) -> list[SchemaVersion]:
        return list(self._versions.values())

    def get_version(self, version: Hashable) -> SchemaVersion | None:
        return self._versions.get(version)

    def get_migration(self, source: Hashable, target: Hashable) -> Migration | None:
        return self._migrations.get((source, target))

    def migrate(self, data: Any, source: Hashable, target: Hashable) -> Result:
        """Run the migration registered from ``source`` to ``target``."""
        if source == target and source in self._versions:
            return self._versions[source].schema.safe_parse(data)

        migration = self.get_migration(source, target)
        if migration is None:
            return _failure(
                f"No migration path defined from version {source} to {target}",
                "migration.no_path",
                {"from": source, "to": target},
            )
        logger.debug("Migrating data from version %s to %s", source, target)
        return migration.migrate(data)


def create_version_registry() -> VersionRegistry:
    return VersionRegistry()
