"""
Point d'entrée principal de l'agent conntrack

Ce module orchestre tous les composants de l'agent et peut être exécuté
de deux manières :
- En mode collecte unique (un cycle, sortie JSON)
- En mode service (cycles périodiques, une ligne JSON par cycle)
"""

import sys
import json
import signal
import argparse
import threading

from conntrack_agent.core.config import AgentConfig, create_default_config
from conntrack_agent.core.logger import AgentLogger
from conntrack_agent.core.collector import ConntrackCollector, SAMPLE_CONFIG
from conntrack_agent.core.scheduler import CollectionScheduler
from conntrack_agent.core.exceptions import ConntrackUnavailableError


class ConntrackAgent:
    """
    Agent conntrack principal

    Cette classe orchestre la configuration, le logging, la collecte et
    la planification des cycles.
    """

    def __init__(self, config_path=None, stats_provider=None):
        """
        Initialise l'agent

        Args:
            config_path: Chemin vers le fichier de configuration
            stats_provider: Fournisseur de statistiques (celui de la plateforme si None)
        """
        self.config = AgentConfig(config_path)

        self.logger = AgentLogger(self.config)
        self.app_logger = self.logger.get_logger()

        self.collector = ConntrackCollector(self.config, self.logger, stats_provider)
        self.scheduler = None

        # État de l'agent
        self.running = False
        self.shutdown_event = threading.Event()
        self._output_lock = threading.Lock()

        self.app_logger.debug("Agent conntrack initialisé")

    def collect_only(self):
        """
        Effectue un cycle de collecte unique

        Un cycle en échec renvoie tout de même les compteurs et erreurs
        non fatales déjà produits, avec la clé 'error'.

        Returns:
            tuple: (succès, mesures collectées)
        """
        try:
            return True, self.collector.collect_all()
        except ConntrackUnavailableError as e:
            return False, e.result

    def collect_and_emit(self):
        """
        Effectue un cycle et écrit le résultat sur la sortie configurée

        Appelée par le planificateur ; un cycle en échec est aussi écrit
        et le cycle suivant est tenté normalement.
        """
        _, data = self.collect_only()
        line = json.dumps(data, ensure_ascii=False)
        output_file = self.config.get_output_config()['file']

        with self._output_lock:
            if output_file:
                with open(output_file, 'a', encoding='utf-8') as f:
                    f.write(line + "\n")
            else:
                sys.stdout.write(line + "\n")
                sys.stdout.flush()

    def start_scheduler(self):
        """
        Démarre le planificateur de cycles
        """
        if self.scheduler:
            self.app_logger.warning("Le planificateur est déjà démarré")
            return

        self.scheduler = CollectionScheduler(self.config, self.logger, self.collect_and_emit)
        self.scheduler.start()

    def stop_scheduler(self):
        if self.scheduler:
            self.scheduler.stop()
            self.scheduler = None

    def run_service_mode(self):
        """
        Lance l'agent en mode service

        Un premier cycle est exécuté immédiatement, puis le planificateur
        prend le relais jusqu'à réception d'un signal d'arrêt.
        """
        self.app_logger.info("Démarrage de l'agent conntrack en mode service")
        self.logger.log_config_info(self.config)

        try:
            self._setup_signal_handlers()

            self.running = True
            self.start_scheduler()
            self.scheduler.force_run()

            while self.running and not self.shutdown_event.is_set():
                self.shutdown_event.wait(timeout=1.0)

        except KeyboardInterrupt:
            self.app_logger.info("Interruption clavier détectée")
        finally:
            self.shutdown()

    def _setup_signal_handlers(self):
        """
        Configure les gestionnaires de signaux pour l'arrêt propre
        """
        def signal_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            self.app_logger.info(f"Signal {signal_name} reçu - Arrêt en cours...")
            self.shutdown()

        signal.signal(signal.SIGTERM, signal_handler)
        signal.signal(signal.SIGINT, signal_handler)

    def shutdown(self):
        """
        Arrête proprement tous les composants de l'agent
        """
        if not self.running:
            return

        self.app_logger.info("Arrêt de l'agent conntrack...")

        self.running = False
        self.shutdown_event.set()
        self.stop_scheduler()

        self.app_logger.info("Agent conntrack arrêté proprement")


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='conntrack-agent',
        description='Agent conntrack - Collecte des compteurs de suivi de connexions du noyau'
    )

    parser.add_argument(
        '--config', '-c',
        type=str,
        help='Chemin vers le fichier de configuration'
    )

    parser.add_argument(
        '--mode', '-m',
        choices=['collect', 'service'],
        default='collect',
        help='Mode de fonctionnement de l\'agent'
    )

    parser.add_argument(
        '--output', '-o',
        type=str,
        help='Fichier de sortie pour les mesures (mode collect)'
    )

    parser.add_argument(
        '--create-config',
        action='store_true',
        help='Crée un fichier de configuration par défaut'
    )

    parser.add_argument(
        '--validate-config',
        action='store_true',
        help='Valide la configuration actuelle'
    )

    parser.add_argument(
        '--sample-config',
        action='store_true',
        help='Affiche un exemple de configuration commenté'
    )

    return parser


def main(argv=None, stats_provider=None):
    """
    Point d'entrée principal avec gestion des arguments de ligne de commande

    Returns:
        int: Code de sortie
    """
    args = create_parser().parse_args(argv)

    if args.sample_config:
        print(SAMPLE_CONFIG, end='')
        return 0

    if args.create_config:
        if not args.config:
            print("--create-config nécessite --config", file=sys.stderr)
            return 1
        try:
            create_default_config(args.config)
        except OSError as e:
            print(f"Erreur création configuration: {e}", file=sys.stderr)
            return 1
        return 0

    agent = ConntrackAgent(args.config, stats_provider)

    if args.validate_config:
        if agent.config.validate():
            print("Configuration valide")
            return 0
        print("Configuration invalide")
        return 1

    if args.mode == 'service':
        agent.run_service_mode()
        return 0

    success, data = agent.collect_only()

    if args.output:
        with open(args.output, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        agent.app_logger.info(f"Mesures sauvegardées dans: {args.output}")
    else:
        print(json.dumps(data, indent=2, ensure_ascii=False))

    return 0 if success else 1


if __name__ == '__main__':
    sys.exit(main())
