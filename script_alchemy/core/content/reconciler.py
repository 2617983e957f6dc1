"""
Merging of a desired set of files into a project's current files.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from logging import Logger
from typing import Iterable

from ..envelope import ErrorInfo, ResponseEnvelope
from ..exceptions import ConfigurationError
from .file import File, FileType, validate_files
from .service import (
    GetContentOptions,
    ProjectContentService,
    files_from_envelope,
)

__all__ = [
    "CollisionStrategy",
    "MergePlan",
    "ContentReconciler",
    "merge",
]


class CollisionStrategy(Enum):
    """
    How a desired file is merged when a file with the same `(name, type)`
    already exists.
    """

    ABORT = "abort"
    """Reject the whole merge, reporting every collision"""

    REPLACE = "replace"
    """Desired file overwrites existing file"""

    SKIP = "skip"
    """Existing file is kept, desired file is dropped"""

    RENAME = "rename"
    """Desired file is added under a new name suffixed with `_N`"""

    @classmethod
    def coerce(cls, value: CollisionStrategy | str) -> CollisionStrategy:
        """
        Get strategy from enum member or its value, raising
        {obj}`ConfigurationError` if unknown.
        """
        if isinstance(value, cls):
            return value

        try:
            return cls(value)
        except ValueError:
            choices = ", ".join(s.value for s in cls)
            raise ConfigurationError(
                [
                    f"unknown collision strategy {value!r}, expected one of: {choices}"
                ]
            ) from None


@dataclass
class MergePlan:
    """
    Outcome of merging desired files into current files.
    """

    strategy: CollisionStrategy
    files: tuple[File, ...] = ()
    """Merged non-manifest files"""

    manifest: File | None = None
    """Winning manifest, if either side had one"""

    collisions: tuple[File, ...] = ()
    """Desired files rejected by {obj}`CollisionStrategy.ABORT`"""

    added: int = 0
    replaced: int = 0
    renamed: int = 0
    skipped: int = 0
    unchanged: int = 0

    @property
    def aborted(self) -> bool:
        return len(self.collisions) > 0

    @property
    def output(self) -> tuple[File, ...]:
        """
        Files to send: merged files followed by the manifest, if any.
        """
        if self.manifest is None:
            return self.files
        return self.files + (self.manifest,)

    @property
    def summary(self) -> str:
        """
        Brief summary of how many desired files fall in each category.
        """
        desc = "(added/replaced/renamed/skipped/unchanged) "
        counts = "/".join(
            str(c)
            for c in [
                self.added,
                self.replaced,
                self.renamed,
                self.skipped,
                self.unchanged,
            ]
        )
        return f"{desc}{counts}, {len(self.output)} files total"


def merge(
    current: Iterable[File],
    desired: Iterable[File],
    strategy: CollisionStrategy,
    *,
    clear: bool = False,
    keep_manifest: bool = False,
) -> MergePlan:
    """
    Merge desired files into current files without performing any I/O.

    The manifest is taken out of both sides before merging and is never
    subject to collision handling. Exactly one manifest is appended to the
    output if either side has one.
    """
    current_files, current_manifest = _split_manifest(tuple(current))
    desired_files, desired_manifest = _split_manifest(tuple(desired))

    if keep_manifest:
        manifest = current_manifest or desired_manifest
    else:
        manifest = desired_manifest or current_manifest

    plan = MergePlan(strategy=strategy, manifest=manifest)

    if clear:
        plan.files = desired_files
        plan.added = len(desired_files)
        return plan

    # drop no-op writes: same file with same source already exists
    pending = tuple(
        d
        for d in desired_files
        if not any(d.same_content(c) for c in current_files)
    )
    plan.unchanged = len(desired_files) - len(pending)

    current_ids = {f.identity for f in current_files}

    match strategy:
        case CollisionStrategy.ABORT:
            collisions = tuple(d for d in pending if d.identity in current_ids)
            if collisions:
                plan.collisions = collisions
                plan.files = current_files
                return plan

            plan.files = current_files + pending
            plan.added = len(pending)

        case CollisionStrategy.REPLACE:
            desired_ids = {d.identity for d in pending}
            kept = tuple(
                f for f in current_files if f.identity not in desired_ids
            )

            plan.files = kept + pending
            plan.replaced = len(current_files) - len(kept)
            plan.added = len(pending) - plan.replaced

        case CollisionStrategy.SKIP:
            added = tuple(d for d in pending if d.identity not in current_ids)

            plan.files = current_files + added
            plan.added = len(added)
            plan.skipped = len(pending) - len(added)

        case CollisionStrategy.RENAME:
            files = current_files
            for d in pending:
                ids = {f.identity for f in files}

                if d.identity in ids:
                    d = d.model_copy(update={"name": _unique_name(d, ids)})
                    plan.renamed += 1
                else:
                    plan.added += 1

                files = files + (d,)

            plan.files = files

    return plan


class ContentReconciler:
    """
    Synchronizes a desired set of files with a project's current content.
    """

    _content: ProjectContentService
    _logger: Logger

    def __init__(
        self, content: ProjectContentService, *, logger: Logger | None = None
    ):
        self._content = content
        self._logger = logger or logging.getLogger()

    def reconcile(
        self,
        script_id: str,
        files: Iterable[File | dict],
        strategy: CollisionStrategy | str = CollisionStrategy.ABORT,
        *,
        clear: bool = False,
        keep_manifest: bool = False,
        dry_run: bool = False,
    ) -> ResponseEnvelope:
        """
        Merge `files` into the project's current files and update the
        project.

        Current files are always fetched bypassing the cache. If that fetch
        fails, its envelope is returned unchanged and nothing is merged.

        A collision under {obj}`CollisionStrategy.ABORT` is returned as a
        failed envelope with `collision="abort"` rather than raised, so the
        caller may retry with another strategy.

        If the project holds a file which is not a {obj}`File` of a known
        {obj}`FileType`, nothing is merged and a failed envelope with status
        `INVALID_CONTENT` is returned.

        :param script_id: Project to update
        :param files: Desired files, as {obj}`File` or equivalent dicts
        :param strategy: How to handle desired files which already exist
        :param clear: Discard all current files except the manifest
        :param keep_manifest: Prefer current manifest over a desired one
        :param dry_run: Compute and log the merge without updating the project

        :raises ConfigurationError: If any file type or the strategy is
            unknown, reporting every problem at once
        """
        errors: list[str] = []

        try:
            strategy = CollisionStrategy.coerce(strategy)
        except ConfigurationError as e:
            errors += e.errors

        desired, file_errors = validate_files(files)
        errors += file_errors

        if errors:
            raise ConfigurationError(errors)

        assert isinstance(strategy, CollisionStrategy)

        current_envelope = self._content.get_content(
            script_id, GetContentOptions(no_cache=True)
        )
        if not current_envelope.success:
            return current_envelope

        current, invalid = files_from_envelope(current_envelope)
        if invalid:
            # update replaces all content, so files left out would be deleted
            self._logger.warning(
                f"Not updating {script_id}: unsupported current files: {invalid}"
            )
            return ResponseEnvelope(
                success=False,
                extended=ErrorInfo(
                    message=f"Project has unsupported files: {'; '.join(invalid)}",
                    status="INVALID_CONTENT",
                    details=invalid,
                ),
            )

        plan = merge(
            current,
            desired,
            strategy,
            clear=clear,
            keep_manifest=keep_manifest,
        )

        if plan.aborted:
            collided = ", ".join(f.str_summary for f in plan.collisions)
            self._logger.warning(
                f"Not updating {script_id}: files already exist: {collided}"
            )
            return ResponseEnvelope(
                success=False,
                collision=strategy.value,
                extended=ErrorInfo(
                    message=f"Files already exist: {collided}",
                    status="COLLISION",
                    details=[f.str_summary for f in plan.collisions],
                ),
            )

        self._logger.info(
            f"Reconciling {script_id} with strategy={strategy.value}: {plan.summary}"
        )

        if dry_run:
            return ResponseEnvelope(
                success=True,
                data={"files": [f.to_payload() for f in plan.output]},
            )

        return self._content.update_content(script_id, plan.output)


def _split_manifest(
    files: tuple[File, ...]
) -> tuple[tuple[File, ...], File | None]:
    """
    Separate the manifest from other files.
    """
    manifest = next((f for f in files if f.is_manifest), None)
    return tuple(f for f in files if not f.is_manifest), manifest


def _unique_name(file: File, ids: set[tuple[str, FileType]]) -> str:
    n = 0
    while (f"{file.name}_{n}", file.type) in ids:
        n += 1
    return f"{file.name}_{n}"
