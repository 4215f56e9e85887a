"""
Interface des fournisseurs de statistiques conntrack

Un fournisseur expose une seule opération : récupérer les statistiques
conntrack, agrégées ou par CPU. L'implémentation de production lit procfs,
les tests peuvent fournir leur propre implémentation.
"""

from abc import ABC, abstractmethod
from collections import namedtuple
from typing import List


# Ordre des colonnes de /proc/net/stat/nf_conntrack
CONNTRACK_STAT_FIELDS = (
    'entries',         # entrées dans la table conntrack
    'searched',        # recherches effectuées dans la table
    'found',           # recherches réussies
    'new',             # entrées ajoutées sans être attendues
    'invalid',         # paquets impossibles à suivre
    'ignore',          # paquets déjà associés à une entrée
    'delete',          # entrées supprimées
    'delete_list',     # entrées placées dans la liste des mourantes
    'insert',          # entrées insérées dans la liste
    'insert_failed',   # insertions échouées (entrée déjà présente)
    'drop',            # paquets perdus suite à un échec conntrack
    'early_drop',      # entrées abandonnées pour faire de la place
    'icmp_error',      # sous-ensemble de invalid, erreurs ICMP
    'expect_new',      # entrées ajoutées après une expectation
    'expect_create',   # expectations ajoutées
    'expect_delete',   # expectations supprimées
    'search_restart',  # recherches relancées suite à un redimensionnement
)

ConntrackStat = namedtuple('ConntrackStat', CONNTRACK_STAT_FIELDS)


class ConntrackStatsProvider(ABC):
    """Source des statistiques conntrack de la plateforme"""

    @abstractmethod
    def net_conntrack(self, per_cpu: bool) -> List[ConntrackStat]:
        """
        Récupère les statistiques conntrack

        Args:
            per_cpu: True pour une entrée par CPU, False pour une entrée agrégée

        Returns:
            list: Entrées ConntrackStat, dans l'ordre des CPU

        Raises:
            StatsProviderError: si les statistiques sont indisponibles
        """
