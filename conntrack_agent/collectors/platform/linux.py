"""
Fournisseur de statistiques conntrack pour Linux

Lit /proc/net/stat/nf_conntrack : une ligne d'en-tête puis une ligne
par CPU, chaque colonne étant un compteur hexadécimal.
"""

import os
from typing import List

import psutil

from .base import ConntrackStat, ConntrackStatsProvider, CONNTRACK_STAT_FIELDS
from ...core.exceptions import StatsProviderError


STAT_FILE = os.path.join('net', 'stat', 'nf_conntrack')


class LinuxConntrackStatsProvider(ConntrackStatsProvider):
    """
    Statistiques conntrack lues depuis procfs

    La racine procfs suit psutil.PROCFS_PATH, ce qui permet de lire le
    /proc de l'hôte depuis un conteneur.
    """

    def __init__(self, procfs_path: str = None):
        self.procfs_path = procfs_path or getattr(psutil, 'PROCFS_PATH', '/proc')

    @property
    def stat_file(self) -> str:
        return os.path.join(self.procfs_path, STAT_FILE)

    def net_conntrack(self, per_cpu: bool) -> List[ConntrackStat]:
        rows = self._read_rows()

        if per_cpu or not rows:
            return rows

        # Agrégat: somme colonne par colonne sur tous les CPU
        totals = [sum(column) for column in zip(*rows)]
        return [ConntrackStat(*totals)]

    def _read_rows(self) -> List[ConntrackStat]:
        """
        Parse le fichier de statistiques

        Returns:
            list: Une entrée par ligne de données

        Raises:
            StatsProviderError: fichier illisible ou valeur non hexadécimale
        """
        try:
            with open(self.stat_file, 'r', encoding='utf-8') as f:
                lines = f.readlines()
        except OSError as e:
            raise StatsProviderError(f"Lecture impossible de {self.stat_file}: {e}") from e

        rows = []
        for line in lines:
            columns = line.split()
            if len(columns) != len(CONNTRACK_STAT_FIELDS) or columns[0] == 'entries':
                continue

            try:
                rows.append(ConntrackStat(*(int(column, 16) for column in columns)))
            except ValueError as e:
                raise StatsProviderError(f"Valeur invalide dans {self.stat_file}: {e}") from e

        return rows
