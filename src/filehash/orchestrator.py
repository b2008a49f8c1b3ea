# Copyright 2025 CrownOps Engineering
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Drive file groups through fingerprinting, naming, copying and mapping.

Each group fans out one task per source file on the running event loop.
Fingerprinting and copies run on worker threads, and at most ``concurrency``
files are in flight at once. Results arrive in any order; the mapping
aggregator counts settled files and the mapping is persisted once, after the
last file settles.
"""

from __future__ import annotations

import asyncio
import logging
import posixpath
import time
from typing import TYPE_CHECKING

from filehash.config.models import HashOptions
from filehash.config.validation import resolve_concurrency
from filehash.core.model_types import FailurePolicy, LogComponent
from filehash.core.type_aliases import SourcePath
from filehash.core.types import FileRecord, GroupResult
from filehash.environment import LocalFileSystem
from filehash.exceptions import FingerprintError, GroupProcessingError, MaterializeError
from filehash.fingerprint import Fingerprinter
from filehash.logging_utils import structured_extra
from filehash.mapping import MappingAggregator
from filehash.naming import derive_mapping_path, derive_paths
from filehash.template import TemplateRenderer

if TYPE_CHECKING:
    from collections.abc import Sequence

    from filehash.core.types import DerivedPaths, FileGroup
    from filehash.environment import Environment

__all__ = [
    "filter_sources",
    "materialize",
    "process_group",
    "process_groups",
    "resolve_source",
]

logger: logging.Logger = logging.getLogger("filehash.orchestrator")


def resolve_source(cwd: str | None, source: str) -> str:
    """Join `source` onto the group base directory."""
    return posixpath.normpath(f"{cwd}/{source}") if cwd else source


def filter_sources(group: FileGroup, env: Environment) -> list[SourcePath]:
    """Keep the sources that name existing regular files, warning about the rest.

    Entries resolving to a file already kept are dropped, so each file is
    fingerprinted and copied once.
    """
    kept: list[SourcePath] = []
    seen: set[str] = set()
    for source in group.sources:
        resolved = resolve_source(group.cwd, source)
        normalized = posixpath.normpath(resolved)
        if normalized in seen:
            logger.warning(
                'Source "%s" is listed more than once; skipping the repeat.',
                resolved,
                extra=structured_extra(LogComponent.GROUP, path=resolved),
            )
            continue
        if not env.exists(resolved):
            logger.warning(
                'Source file "%s" not found.',
                resolved,
                extra=structured_extra(LogComponent.GROUP, path=resolved),
            )
            continue
        if not env.is_file(resolved):
            logger.warning(
                'Source "%s" is not a regular file; skipping.',
                resolved,
                extra=structured_extra(LogComponent.GROUP, path=resolved),
            )
            continue
        seen.add(normalized)
        kept.append(SourcePath(source))
    return kept


def materialize(
    record: FileRecord,
    derived: DerivedPaths,
    *,
    dest: str | None,
    keep: bool,
    env: Environment,
) -> bool:
    """Copy a fingerprinted file to its derived target.

    Nothing happens without a target or when the target is the source
    itself. A target outside `dest` is still written, with a warning.

    Returns:
        ``True`` when a copy was written.

    Raises:
        MaterializeError: If the copy or the source removal fails.
    """
    target = derived.target
    if target is None or target == record.resolved:
        return False
    if dest and posixpath.normpath(dest) not in target:
        logger.warning(
            'Renamed file "%s" is not in dest directory "%s".',
            target,
            dest,
            extra=structured_extra(LogComponent.MATERIALIZE, path=record.resolved, target=target),
        )
    try:
        env.copy(record.resolved, target)
    except OSError as exc:
        raise MaterializeError(record.resolved, target, exc) from exc
    logger.info(
        '"%s" => "%s"',
        record.resolved,
        target,
        extra=structured_extra(LogComponent.MATERIALIZE, path=record.resolved, target=target),
    )
    if not keep:
        try:
            env.delete(record.resolved)
        except OSError as exc:
            raise MaterializeError(record.resolved, target, exc) from exc
        logger.debug("Removed source %s", record.resolved)
    return True


class _GroupRun:
    """State for one in-flight group: shared collaborators plus tallies."""

    def __init__(
        self,
        group: FileGroup,
        options: HashOptions,
        *,
        env: Environment,
        renderer: TemplateRenderer,
        aggregator: MappingAggregator,
    ) -> None:
        self.group = group
        self.options = options
        self.env = env
        self.renderer = renderer
        self.aggregator = aggregator
        self.fingerprinter = Fingerprinter(options, renderer=renderer, env=env)
        self.semaphore = asyncio.Semaphore(resolve_concurrency(options.concurrency))
        self.processed = 0
        self.failures: dict[SourcePath, FingerprintError] = {}

    async def process(self, source: SourcePath) -> None:
        resolved = resolve_source(self.group.cwd, source)
        try:
            async with self.semaphore:
                try:
                    fingerprint = await self.fingerprinter.fingerprint(resolved)
                except FingerprintError as exc:
                    self._record_failure(source, exc)
                    return
                record = FileRecord(source=source, resolved=resolved, fingerprint=fingerprint)
                derived = derive_paths(
                    record,
                    self.options,
                    cwd=self.group.cwd,
                    dest=self.group.dest,
                    renderer=self.renderer,
                )
                _ = await asyncio.to_thread(
                    materialize,
                    record,
                    derived,
                    dest=self.group.dest,
                    keep=self.options.keep,
                    env=self.env,
                )
            if derived.key is not None and derived.value is not None:
                self.aggregator.record(derived.key, derived.value)
            self.processed += 1
        finally:
            if self.aggregator.settle():
                logger.info(
                    "All hashed.",
                    extra=structured_extra(LogComponent.GROUP, count=self.aggregator.settled),
                )

    def _record_failure(self, source: SourcePath, error: FingerprintError) -> None:
        self.failures[source] = error
        level = logging.ERROR if self.options.on_error is FailurePolicy.SKIP else logging.DEBUG
        logger.log(
            level,
            "%s",
            error,
            extra=structured_extra(
                LogComponent.FINGERPRINT,
                path=error.path,
                details={"policy": self.options.on_error},
            ),
        )


async def process_group(
    group: FileGroup,
    options: HashOptions | None = None,
    *,
    env: Environment | None = None,
    renderer: TemplateRenderer | None = None,
) -> GroupResult:
    """Fingerprint one group end to end.

    Args:
        group: Files to process; its own options take precedence.
        options: Options for groups without their own.
        env: Environment performing the I/O (local filesystem by default).
        renderer: Template renderer (default delimiters when omitted).

    Returns:
        The group outcome with the mapping as persisted.

    Raises:
        GroupProcessingError: If files could not be fingerprinted and the
            ``on_error`` policy is ``fail``. No mapping is written then.
        MaterializeError: If a fingerprinted copy cannot be written.
        MappingReadError: If merging with an existing mapping fails.
    """
    effective = group.options or options or HashOptions()
    env = env or LocalFileSystem()
    renderer = renderer or TemplateRenderer()
    start = time.perf_counter()

    sources = filter_sources(group, env)
    skipped_missing = len(group.sources) - len(sources)
    if not sources:
        logger.info(
            "No source files to hash.",
            extra=structured_extra(LogComponent.GROUP, path=group.cwd or ".", count=0),
        )
        return GroupResult(group=group, mapping={}, skipped=skipped_missing)

    if group.dest and env.exists(group.dest) and not env.is_dir(group.dest):
        logger.warning(
            'Destination "%s" must be a directory.',
            group.dest,
            extra=structured_extra(LogComponent.GROUP, path=group.dest),
        )

    mapping_path = derive_mapping_path(effective.mapping, cwd=group.cwd, dest=group.dest, renderer=renderer)
    aggregator = MappingAggregator(len(sources), mapping_path=mapping_path, merge=effective.merge, env=env)
    run = _GroupRun(group, effective, env=env, renderer=renderer, aggregator=aggregator)

    outcomes = await asyncio.gather(*(run.process(source) for source in sources), return_exceptions=True)
    errors = [outcome for outcome in outcomes if isinstance(outcome, BaseException)]
    if errors:
        for error in errors[1:]:
            logger.debug(
                "Further error in group: %s",
                error,
                extra=structured_extra(LogComponent.GROUP, path=group.cwd or ".", count=len(errors)),
            )
        raise errors[0]

    if run.failures and effective.on_error is FailurePolicy.FAIL:
        raise GroupProcessingError(run.failures)

    mapping = await asyncio.to_thread(aggregator.finalize)
    logger.debug(
        "Group finished",
        extra=structured_extra(
            LogComponent.GROUP,
            path=group.cwd or ".",
            count=run.processed,
            duration_ms=(time.perf_counter() - start) * 1000,
        ),
    )
    return GroupResult(
        group=group,
        mapping=mapping,
        mapping_path=mapping_path,
        processed=run.processed,
        skipped=skipped_missing + len(run.failures),
        failures=run.failures,
    )


async def process_groups(
    groups: Sequence[FileGroup],
    options: HashOptions | None = None,
    *,
    env: Environment | None = None,
    renderer: TemplateRenderer | None = None,
) -> list[GroupResult]:
    """Process `groups` one after another so groups sharing a mapping merge cleanly."""
    env = env or LocalFileSystem()
    return [await process_group(group, options, env=env, renderer=renderer) for group in groups]
