"""
Pruner - drops IR features a specific backend instance cannot realize.

Pruning never fails. Every dropped entry is recorded as an
UnrealizedFeature; kept entries keep their original order.
"""

import logging
from dataclasses import replace
from typing import List, Optional, Tuple

from adapters.types import Capabilities
from compiler.implementations import normalize_implementation
from ir.types import IR, QualityIR, UnrealizedFeature

logger = logging.getLogger(__name__)

NOT_SUPPORTED = "not supported by service"


def prune(
    ir: IR, capabilities: Optional[Capabilities]
) -> Tuple[IR, List[UnrealizedFeature]]:
    """
    Filter an IR against a Capabilities snapshot.

    Prunable categories:
      * video quality tiers, by resolution
      * download clients, by normalized implementation name (only when the
        backend reported any client types)
      * indexers, by implementation name (only when the backend reported
        any indexer types)

    Args:
        ir: The compiled IR
        capabilities: Snapshot from Discover; None means nothing is pruned

    Returns:
        Tuple of (pruned IR, unrealized features). The unrealized features
        are also appended to the returned IR's ``unrealized`` field.
    """
    if capabilities is None:
        return ir, []

    unrealized: List[UnrealizedFeature] = []
    changes = {}

    video = ir.video_quality
    if video is not None:
        supported = set(capabilities.resolutions)
        kept = []
        for tier in video.tiers:
            if tier.resolution in supported:
                kept.append(tier)
            else:
                unrealized.append(
                    UnrealizedFeature(f"resolution:{tier.resolution}", NOT_SUPPORTED)
                )
        if len(kept) != len(video.tiers):
            changes["quality"] = replace(
                ir.quality or QualityIR(), video=replace(video, tiers=tuple(kept))
            )

    if capabilities.download_client_types:
        supported = set(capabilities.download_client_types)
        kept_clients = []
        for client in ir.download_clients:
            if normalize_implementation(client.implementation) in supported:
                kept_clients.append(client)
            else:
                unrealized.append(
                    UnrealizedFeature(
                        f"downloadclient:{client.implementation}", NOT_SUPPORTED
                    )
                )
        changes["download_clients"] = tuple(kept_clients)

    if capabilities.indexer_types:
        supported = set(capabilities.indexer_types)
        kept_indexers = []
        for indexer in ir.indexers:
            if indexer.implementation in supported:
                kept_indexers.append(indexer)
            else:
                unrealized.append(
                    UnrealizedFeature(f"indexer:{indexer.implementation}", NOT_SUPPORTED)
                )
        changes["indexers"] = tuple(kept_indexers)

    for feature in unrealized:
        logger.info(f"Unrealized feature {feature.feature}: {feature.reason}")

    changes["unrealized"] = tuple(ir.unrealized) + tuple(unrealized)
    return replace(ir, **changes), unrealized
