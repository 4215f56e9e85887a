"""
Module de logging pour l'agent conntrack

Ce module fournit un système de logging centralisé avec :
- Rotation automatique des logs
- Différents niveaux de log
- Sortie console sur stderr (stdout transporte les mesures)
"""

import os
import sys
import logging
import logging.handlers


LOGGER_NAME = 'ConntrackAgent'


class AgentLogger:
    """
    Gestionnaire de logging pour l'agent conntrack

    Cette classe configure et gère le système de logging pour l'ensemble
    de l'application, avec rotation automatique et formatage approprié.
    """

    def __init__(self, config=None):
        """
        Initialise le système de logging

        Args:
            config: Instance de AgentConfig pour récupérer les paramètres de log
        """
        self.config = config
        self.logger = logging.getLogger(LOGGER_NAME)

        # Éviter la duplication si déjà configuré
        if not self.logger.handlers:
            self._setup_logging()

    def _setup_logging(self):
        """
        Configure le système de logging avec les handlers appropriés
        """
        if self.config:
            log_level_str = self.config.get('agent', 'log_level', 'INFO')
            log_file = self.config.get('logging', 'log_file')
            max_size = self.config.getint('logging', 'max_log_size', 10485760)  # 10MB
            backup_count = self.config.getint('logging', 'backup_count', 5)
        else:
            log_level_str = 'INFO'
            log_file = self._get_default_log_file()
            max_size = 10485760  # 10MB
            backup_count = 5

        # Convertir le niveau de log string en constante logging
        log_level = getattr(logging, log_level_str.upper(), logging.INFO)
        self.logger.setLevel(log_level)

        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        # Handler pour fichier avec rotation
        if log_file:
            try:
                log_dir = os.path.dirname(log_file)
                if log_dir and not os.path.exists(log_dir):
                    os.makedirs(log_dir, exist_ok=True)

                file_handler = logging.handlers.RotatingFileHandler(
                    filename=log_file,
                    maxBytes=max_size,
                    backupCount=backup_count,
                    encoding='utf-8'
                )
                file_handler.setLevel(log_level)
                file_handler.setFormatter(formatter)
                self.logger.addHandler(file_handler)

            except OSError as e:
                print(f"Erreur lors de la configuration du logging fichier: {e}", file=sys.stderr)

        # Handler console
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(logging.Formatter(fmt='%(levelname)s - %(message)s'))
        self.logger.addHandler(console_handler)

        self.logger.debug("Système de logging initialisé")
        if self.config:
            self.logger.debug(f"Niveau de log: {log_level_str}")
            self.logger.debug(f"Fichier de log: {log_file}")

    def _get_default_log_file(self) -> str:
        return "/tmp/conntrack-agent.log"

    def get_logger(self) -> logging.Logger:
        """
        Retourne l'instance du logger

        Returns:
            logging.Logger: Instance du logger configuré
        """
        return self.logger

    def log_config_info(self, config):
        """
        Log la configuration effective au démarrage

        Args:
            config: Instance de AgentConfig
        """
        self.logger.info("=== Configuration de l'agent ===")

        for key, value in config.get_agent_config().items():
            self.logger.info(f"Agent.{key}: {value}")

        for key, value in config.get_conntrack_config().items():
            self.logger.info(f"Conntrack.{key}: {value or 'défaut'}")

        self.logger.info("=== Fin configuration ===")

