"""
Collecteur des statistiques conntrack de la plateforme

Ce module délègue la lecture au fournisseur de statistiques et transforme
chaque entrée en un enregistrement de compteurs taggé par CPU.
"""

from typing import Dict, Any, List

from .base import BaseCollector
from .platform import CONNTRACK_STAT_FIELDS


MEASUREMENT_NAME = "conntrack"


def _to_counter(value) -> int:
    """Convertit une valeur en compteur entier non signé"""
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"compteur entier attendu, '{value}' trouvé")
    counter = int(value)
    if counter < 0:
        raise ValueError(f"compteur non signé attendu, '{value}' trouvé")
    return counter


class ConntrackStatsCollector(BaseCollector):
    """
    Collecteur des statistiques conntrack (optionnellement par CPU)

    Chaque entrée du fournisseur devient un compteur taggé cpu=all, ou
    cpu=cpu<N> en mode par CPU.
    """

    def __init__(self, config, logger, provider):
        """
        Args:
            config: Instance de AgentConfig
            logger: Instance de logging.Logger
            provider: Instance de ConntrackStatsProvider
        """
        super().__init__(config, logger)
        self.provider = provider

    def collect(self, accumulator) -> List[Dict[str, Any]]:
        """
        Interroge le fournisseur et émet un compteur par entrée

        Args:
            accumulator: Accumulateur recevant compteurs et erreurs

        Returns:
            list: Enregistrements émis ({'tags': ..., 'fields': ...})
        """
        self._start_collection()

        per_cpu = self.config.get_conntrack_config()['per_cpu']
        records = []

        try:
            stats = list(self.provider.net_conntrack(per_cpu))
        except Exception as e:
            self._record_error(accumulator, f"Échec de récupération des statistiques conntrack: {e}")
            stats = []

        for index, stat in enumerate(stats):
            tags = {'cpu': f"cpu{index}" if per_cpu else "all"}

            try:
                fields = {name: _to_counter(getattr(stat, name)) for name in CONNTRACK_STAT_FIELDS}
            except (AttributeError, TypeError, ValueError) as e:
                self._record_error(accumulator, f"Statistique conntrack invalide ({tags['cpu']}): {e}")
                continue

            accumulator.add_counter(MEASUREMENT_NAME, fields, tags)
            records.append({'tags': tags, 'fields': fields})

        self.logger.debug(f"{len(records)} enregistrement(s) de statistiques conntrack émis")
        self.last_collection_duration = self._end_collection()
        return records
