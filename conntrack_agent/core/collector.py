"""
Module collecteur principal pour l'agent conntrack

Ce module orchestre un cycle de collecte :
- Lecture des fichiers de compteurs conntrack
- Statistiques conntrack de la plateforme (si activées)
- Émission des mesures et gestion de l'échec global du cycle
"""

import time
from datetime import datetime
from typing import Dict, Any

from .accumulator import MetricsAccumulator
from .exceptions import ConntrackUnavailableError
from ..collectors.conntrack_files import ConntrackFileCollector
from ..collectors.conntrack_stats import ConntrackStatsCollector, MEASUREMENT_NAME
from ..collectors.platform import get_stats_provider


DESCRIPTION = "Collecte les statistiques conntrack depuis les répertoires et fichiers configurés."

SAMPLE_CONFIG = """\
[conntrack]
## Les valeurs par défaut fonctionnent avec plusieurs versions de conntrack.
## Les préfixes de fichiers nf_ et ip_ sont mutuellement exclusifs selon la
## version du noyau, tout comme les répertoires.

## Ensemble des noms de fichiers recherchés dans les répertoires conntrack.
## Les fichiers absents sont ignorés.
files = ip_conntrack_count, ip_conntrack_max,
        nf_conntrack_count, nf_conntrack_max

## Répertoires dans lesquels chercher les fichiers ci-dessus.
## Les répertoires absents sont ignorés.
dirs = /proc/sys/net/ipv4/netfilter, /proc/sys/net/netfilter

## Collecte des statistiques conntrack (/proc/net/stat/nf_conntrack)
collect_stats = true

## Statistiques par CPU plutôt qu'agrégées
per_cpu = false
"""


class ConntrackCollector:
    """
    Collecteur principal qui orchestre un cycle de collecte conntrack

    Un cycle est synchrone et séquentiel ; un seul cycle à la fois par
    instance.
    """

    def __init__(self, config, logger, stats_provider=None):
        """
        Initialise le collecteur principal

        Args:
            config: Instance de AgentConfig
            logger: Instance de AgentLogger
            stats_provider: Fournisseur de statistiques (celui de la plateforme si None)
        """
        self.config = config
        self.logger = logger.get_logger()

        self.stats_provider = stats_provider or get_stats_provider()
        self.file_collector = ConntrackFileCollector(config, self.logger)
        self.stats_collector = ConntrackStatsCollector(config, self.logger, self.stats_provider)

        # Résumé du dernier cycle
        self._last_status = None
        self._last_collection_time = None
        self._last_duration = 0.0
        self._last_fields_count = 0
        self._last_counters_count = 0
        self._last_errors_count = 0

        self.logger.debug("ConntrackCollector initialisé")

    def description(self) -> str:
        return DESCRIPTION

    def gather(self, accumulator: MetricsAccumulator):
        """
        Exécute un cycle de collecte dans l'accumulateur fourni

        Les statistiques sont collectées même si aucun fichier n'est trouvé.

        Args:
            accumulator: Accumulateur recevant mesures et erreurs

        Raises:
            ConntrackUnavailableError: si aucun champ n'a pu être collecté
        """
        fields = self.file_collector.collect(accumulator)

        if self.config.get_conntrack_config()['collect_stats']:
            self.stats_collector.collect(accumulator)

        if not fields:
            raise ConntrackUnavailableError()

        accumulator.add_fields(MEASUREMENT_NAME, fields)

    def collect_all(self) -> Dict[str, Any]:
        """
        Lance un cycle complet avec un accumulateur neuf

        Returns:
            dict: Mesures et erreurs non fatales au format JSON

        Raises:
            ConntrackUnavailableError: si aucun champ n'a pu être collecté ;
                son attribut result contient les mesures déjà émises
        """
        start_time = time.time()
        accumulator = MetricsAccumulator()
        self.logger.debug("=== Début du cycle de collecte conntrack ===")

        try:
            self.gather(accumulator)
            self._last_status = 'success'
        except ConntrackUnavailableError as e:
            self._last_status = 'unavailable'
            self.logger.error(str(e))
            e.result = accumulator.to_dict()
            e.result['error'] = str(e)
            raise
        finally:
            self._last_duration = time.time() - start_time
            self._last_collection_time = datetime.now()
            self._last_fields_count = len(accumulator.get_measurements(kind='fields'))
            self._last_counters_count = len(accumulator.get_measurements(kind='counter'))
            self._last_errors_count = len(accumulator.errors)

        self.logger.info(
            f"Cycle terminé en {self._last_duration:.3f}s: "
            f"{self._last_counters_count} compteur(s), {self._last_errors_count} erreur(s)"
        )
        return accumulator.to_dict()

    def get_collection_stats(self) -> Dict[str, Any]:
        """
        Retourne les statistiques du dernier cycle

        Returns:
            dict: Statistiques de collecte
        """
        if not self._last_collection_time:
            return {'status': 'no_collection_yet'}

        return {
            'status': self._last_status,
            'last_collection_time': self._last_collection_time.isoformat(),
            'collection_duration': round(self._last_duration, 3),
            'fields_records': self._last_fields_count,
            'counter_records': self._last_counters_count,
            'errors_count': self._last_errors_count
        }
