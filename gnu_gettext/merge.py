# -*- coding: utf-8 -*-
"""Reconcile freshly scanned messages with existing and excluded catalogs.

Per output domain the steps run in a fixed order:

1. join: the existing catalog absorbs the scanned one (``--join-existing``);
2. exclude: entries whose key appears in the exclusion catalog are dropped;
3. rewrite: prefix/suffix are wrapped around every first translated form;
4. headers: defaults fill in whatever header values are still empty.
"""
from __future__ import annotations

import os
from typing import Mapping, Optional

from .catalog import Catalog
from .utils.logging import get_logger

logger = get_logger(__name__)

__all__ = ["remove_matching", "apply_affixes", "merge_domain", "output_path"]


def remove_matching(catalog: Catalog, exclude: Catalog) -> int:
    """Drop from ``catalog`` every entry keyed like one in ``exclude``; return how many."""
    removed = 0
    for translation in exclude:
        if catalog.remove(translation):
            removed += 1
    return removed


def apply_affixes(catalog: Catalog, prefix: str = "", suffix: str = "") -> None:
    """Set each entry's first form to ``prefix + form + suffix``."""
    if not prefix and not suffix:
        return
    for translation in catalog:
        translation.translate(f"{prefix}{translation.translation}{suffix}")


def merge_domain(
    scanned: Catalog,
    existing: Optional[Catalog] = None,
    exclude: Optional[Catalog] = None,
    prefix: str = "",
    suffix: str = "",
    headers: Optional[Mapping[str, Optional[str]]] = None,
) -> Catalog:
    """Run join, exclude, rewrite and header defaults for one domain.

    ``existing`` (when given) is updated in place and returned; otherwise
    ``scanned`` is.
    """
    if existing is not None:
        result = existing.merge_with(scanned)
        result.domain = scanned.domain or result.domain
    else:
        result = scanned

    if exclude is not None:
        removed = remove_matching(result, exclude)
        if removed:
            logger.info("Domain %s: %d excluded message(s) removed", result.domain, removed)

    apply_affixes(result, prefix, suffix)
    if headers:
        result.headers.merge_with(headers)
    return result


def output_path(domain: str, output_dir: Optional[str] = None, output_file: Optional[str] = None) -> str:
    """``output_file`` when given, else ``{domain}.po``; relative names live in ``output_dir``."""
    if output_file:
        if output_file == "-" or not output_dir or os.path.isabs(output_file):
            return output_file
        return os.path.join(output_dir, output_file)
    return os.path.join(output_dir or ".", f"{domain}.po")
