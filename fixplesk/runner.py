"""
Runner: processes domain arguments one at a time, in order.

For each domain the resolver is queried; a resolved domain goes through the
restorer (timed with `profile_block`), an unresolved one is reported and
skipped. Fatal store errors raised by the resolver propagate to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from fixplesk import reporter
from fixplesk.domain.models import PermissionPolicy, RestoreReport
from fixplesk.errors import RestoreError
from fixplesk.resolver import DomainResolver
from fixplesk.restorer import restore
from fixplesk.utils.logging import get_logger
from fixplesk.utils.profiler import profile_block

log = get_logger(__name__)


@dataclass
class RunResult:
    """Reports for restored domains and names of skipped ones, in order."""

    reports: List[RestoreReport] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


def _process_domain(
    domain: str,
    resolver: DomainResolver,
    policy: PermissionPolicy,
    result: RunResult,
) -> None:
    record = resolver.resolve(domain)
    if record is None:
        reporter.warning(f"Could not retrieve information about {domain} from the database")
        result.skipped.append(domain)
        return

    try:
        with profile_block(domain) as stats:
            report = restore(record, policy)
    except RestoreError as exc:
        reporter.warning(f"Skipping {domain}: {exc}")
        result.skipped.append(domain)
        return

    report.duration_seconds = round(stats.duration_seconds, 2)
    for failure in report.failures:
        reporter.warning(f"{failure.operation} failed for {failure.path}: {failure.error}")
    log.info(
        f"[DOMAIN COMPLETE] {domain}",
        extra={
            "domain": domain,
            "duration": report.duration_seconds,
            "peak_rss_bytes": stats.peak_rss_bytes,
        },
    )
    result.reports.append(report)


def run_domains(
    domains: Iterable[str],
    policy: PermissionPolicy,
    resolver: DomainResolver,
    result: Optional[RunResult] = None,
) -> RunResult:
    """
    Resolve and restore every domain sequentially.

    Parameters
    ----------
    domains : iterable[str]
        Domain names in the order given on the command line.
    policy : PermissionPolicy
        Modes applied to every restored tree.
    resolver : DomainResolver
        Open resolver; its connection is shared by all lookups.
    result : RunResult, optional
        Collects the outcome as domains complete, so a caller keeps the
        partial result when a store error aborts the loop.

    Returns
    -------
    RunResult
        Per-domain reports and the skipped domain names.

    Raises
    ------
    StoreConnectionError, StoreQueryError
        Propagated from the resolver; remaining domains are not processed.
    """
    names = list(domains)
    if result is None:
        result = RunResult()
    for index, domain in enumerate(names, start=1):
        log.info(f"[DOMAIN {index}/{len(names)}] {domain}", extra={"domain": domain})
        _process_domain(domain, resolver, policy, result)
    return result


__all__ = ["RunResult", "run_domains"]
