"""
reconcile
=========

Set-based reconciliation of two object inventories.

Given the reference and target :data:`DefinitionMap` of one object category,
:func:`reconcile` classifies every object name into exactly one of
``matching``, ``differing``, ``reference_only`` or ``target_only``.

Reporting is not done here; see :func:`schemadiff.reporting.report_category`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping

DefinitionMap = Dict[str, str]


@dataclass(frozen=True)
class ComparisonResult:
    """Classification of the object names of one category.

    Names keep a stable order: reference keys first (in map order), then the
    keys that only exist on the target side.
    """

    matching: List[str] = field(default_factory=list)
    differing: List[str] = field(default_factory=list)
    reference_only: List[str] = field(default_factory=list)
    target_only: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True when no drift was found."""
        return not (self.differing or self.reference_only or self.target_only)


def union_keys(reference: Mapping[str, str], target: Mapping[str, str]) -> List[str]:
    """Return the de-duplicated union of both key sets (reference order first)."""
    return list(dict.fromkeys([*reference, *target]))


def reconcile(reference: Mapping[str, str], target: Mapping[str, str]) -> ComparisonResult:
    """Classify every object name of two definition maps.

    Parameters
    ----------
    reference:
        Object name to canonical definition, reference environment.
    target:
        Object name to canonical definition, target environment.

    Returns
    -------
    ComparisonResult
        ``result.ok`` is True iff every name exists on both sides with
        identical canonical text.
    """
    result = ComparisonResult()
    for name in union_keys(reference, target):
        if name not in target:
            result.reference_only.append(name)
        elif name not in reference:
            result.target_only.append(name)
        elif reference[name] != target[name]:
            result.differing.append(name)
        else:
            result.matching.append(name)
    return result
