"""
Package des fournisseurs de statistiques spécifiques par plateforme

Seul Linux expose les statistiques conntrack ; les autres plateformes
reçoivent un fournisseur qui signale l'absence de support.
"""

import sys
from typing import List

from .base import ConntrackStat, ConntrackStatsProvider, CONNTRACK_STAT_FIELDS
from ...core.exceptions import StatsProviderError


class UnsupportedPlatformStatsProvider(ConntrackStatsProvider):
    """Fournisseur pour les plateformes sans conntrack"""

    def __init__(self, platform_name: str = None):
        self.platform_name = platform_name or sys.platform

    def net_conntrack(self, per_cpu: bool) -> List[ConntrackStat]:
        raise StatsProviderError(
            f"Statistiques conntrack non supportées sur la plateforme {self.platform_name}"
        )


def get_stats_provider() -> ConntrackStatsProvider:
    """
    Sélectionne le fournisseur de statistiques selon la plateforme

    Returns:
        ConntrackStatsProvider: Fournisseur adapté à sys.platform
    """
    if sys.platform.startswith('linux'):
        from .linux import LinuxConntrackStatsProvider
        return LinuxConntrackStatsProvider()

    return UnsupportedPlatformStatsProvider()


__all__ = [
    'CONNTRACK_STAT_FIELDS',
    'ConntrackStat',
    'ConntrackStatsProvider',
    'UnsupportedPlatformStatsProvider',
    'get_stats_provider',
]
