"""
Classe de base pour tous les collecteurs de l'agent conntrack

Ce module définit l'interface commune que tous les collecteurs
doivent implémenter, ainsi que des utilitaires partagés.
"""

import time
from abc import ABC, abstractmethod
from typing import Dict, Any


class BaseCollector(ABC):
    """
    Classe de base abstraite pour tous les collecteurs

    Cette classe définit l'interface commune et fournit le suivi des
    erreurs non fatales et de la durée de collecte.
    """

    def __init__(self, config, logger):
        """
        Initialise le collecteur de base

        Args:
            config: Instance de AgentConfig
            logger: Instance de logging.Logger
        """
        self.config = config
        self.logger = logger

        # Métadonnées du collecteur
        self.collector_name = self.__class__.__name__
        self.collection_start_time = None
        self.collection_errors = []
        self.last_collection_duration = 0.0

    @abstractmethod
    def collect(self, accumulator):
        """
        Méthode principale de collecte - doit être implémentée par chaque collecteur

        Args:
            accumulator: Instance de MetricsAccumulator recevant erreurs et mesures
        """

    def _start_collection(self):
        """
        Démarre une session de collecte
        """
        self.collection_start_time = time.time()
        self.collection_errors = []
        self.logger.debug(f"Début collecte {self.collector_name}")

    def _end_collection(self) -> float:
        """
        Termine une session de collecte

        Returns:
            float: Durée de collecte en secondes
        """
        if self.collection_start_time:
            duration = time.time() - self.collection_start_time
            self.logger.debug(f"Collecte {self.collector_name} terminée en {duration:.3f}s")

            if self.collection_errors:
                self.logger.warning(f"Collecte {self.collector_name} avec {len(self.collection_errors)} erreur(s)")

            return duration
        return 0.0

    def _record_error(self, accumulator, message: str):
        """
        Enregistre une erreur non fatale sans interrompre la collecte

        Args:
            accumulator: Accumulateur du cycle
            message: Description de l'erreur
        """
        self.collection_errors.append(message)
        accumulator.add_error(message)
        self.logger.warning(message)

    def get_collection_stats(self) -> Dict[str, Any]:
        """
        Retourne les statistiques de la dernière collecte

        Returns:
            dict: Statistiques du collecteur
        """
        return {
            'collector_name': self.collector_name,
            'collection_duration': self.last_collection_duration,
            'errors_count': len(self.collection_errors),
            'errors': self.collection_errors.copy()
        }
