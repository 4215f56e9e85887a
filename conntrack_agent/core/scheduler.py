"""
Module de planification pour l'agent conntrack

Ce module gère :
- La planification des cycles de collecte périodiques
- L'exécution des cycles dans un thread d'arrière-plan
- Le démarrage et l'arrêt du scheduler
"""

import threading
from datetime import datetime
from typing import Callable

import schedule


class CollectionScheduler:
    """
    Gestionnaire de planification des cycles de collecte

    Les tâches sont exécutées par un seul thread : deux cycles ne se
    chevauchent jamais.
    """

    def __init__(self, config, logger, collection_callback: Callable[[], None]):
        """
        Initialise le scheduler

        Args:
            config: Instance de AgentConfig
            logger: Instance de AgentLogger
            collection_callback: Fonction à appeler pour déclencher un cycle
        """
        self.config = config
        self.logger = logger.get_logger()
        self.collection_callback = collection_callback

        # État du scheduler
        self.is_running = False
        self.scheduler_thread = None
        self.stop_event = threading.Event()

        self.scheduler = schedule.Scheduler()
        self.interval = None
        self.next_run = None
        self.runs_count = 0

        self._setup_schedule()

        self.logger.debug("CollectionScheduler initialisé")

    def _setup_schedule(self):
        """
        Configure la planification basée sur la configuration
        """
        interval = self.config.get_agent_config()['interval']
        if interval < 1:
            self.logger.warning(f"Intervalle invalide '{interval}', utilisation de 10 secondes")
            interval = 10
        self.interval = interval

        # Effacer les tâches existantes
        self.scheduler.clear()
        self.scheduler.every(self.interval).seconds.do(self._scheduled_collection)
        self.logger.info(f"Planification configurée: toutes les {self.interval} secondes")

        self._update_next_run()

    def _scheduled_collection(self):
        """
        Méthode appelée par le scheduler pour déclencher un cycle
        """
        try:
            self.collection_callback()
        except Exception:
            self.logger.exception("Erreur lors du cycle de collecte planifié")
        finally:
            self.runs_count += 1
            self._update_next_run()

    def _update_next_run(self):
        self.next_run = self.scheduler.next_run
        if self.next_run:
            self.logger.debug(f"Prochain cycle planifié: {self.next_run}")

    def start(self):
        """
        Démarre le scheduler en arrière-plan
        """
        if self.is_running:
            self.logger.warning("Scheduler déjà en cours d'exécution")
            return

        self.logger.info("Démarrage du scheduler...")

        self.is_running = True
        self.stop_event.clear()

        self.scheduler_thread = threading.Thread(
            target=self._scheduler_loop,
            name="CollectionScheduler",
            daemon=True
        )
        self.scheduler_thread.start()

        self.logger.info(f"Scheduler démarré (intervalle: {self.interval}s)")

    def stop(self):
        """
        Arrête le scheduler
        """
        if not self.is_running:
            self.logger.warning("Scheduler pas en cours d'exécution")
            return

        self.logger.info("Arrêt du scheduler...")

        self.is_running = False
        self.stop_event.set()

        if self.scheduler_thread and self.scheduler_thread.is_alive():
            self.scheduler_thread.join(timeout=5)

        self.logger.info("Scheduler arrêté")

    def _scheduler_loop(self):
        """
        Boucle principale du scheduler
        """
        self.logger.debug("Boucle du scheduler démarrée")

        while not self.stop_event.is_set():
            self.scheduler.run_pending()
            self.stop_event.wait(timeout=min(1.0, self.interval))

        self.logger.debug("Boucle du scheduler terminée")

    def force_run(self):
        """
        Force l'exécution immédiate d'un cycle de collecte
        """
        self.logger.info("Cycle de collecte forcé demandé")
        self._scheduled_collection()

    def get_status(self) -> dict:
        """
        Retourne le statut actuel du scheduler

        Returns:
            dict: Informations sur l'état du scheduler
        """
        return {
            'is_running': self.is_running,
            'interval': self.interval,
            'runs_count': self.runs_count,
            'next_run': self.next_run.isoformat() if self.next_run else None,
            'next_run_in': str(self.next_run - datetime.now()) if self.next_run else None,
            'scheduled_jobs_count': len(self.scheduler.get_jobs())
        }

    def update_interval(self, seconds: int):
        """
        Met à jour l'intervalle de collecte

        Args:
            seconds: Nouvel intervalle en secondes
        """
        self.logger.info(f"Mise à jour de l'intervalle: {seconds}s")
        self.config.set('agent', 'interval', seconds)
        self._setup_schedule()
