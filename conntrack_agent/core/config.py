"""
Module de configuration pour l'agent conntrack

Ce module gère la configuration de l'agent, incluant :
- Lecture du fichier de configuration INI
- Validation des paramètres
- Valeurs par défaut (répertoires et fichiers conntrack)
"""

import os
import sys
import configparser
from typing import Dict, Any, List, Optional


# Les préfixes nf_ et ip_ sont mutuellement exclusifs selon la version du
# noyau, tout comme les répertoires.
DEFAULT_FILES = (
    "ip_conntrack_count",
    "ip_conntrack_max",
    "nf_conntrack_count",
    "nf_conntrack_max",
)

DEFAULT_DIRS = (
    "/proc/sys/net/ipv4/netfilter",
    "/proc/sys/net/netfilter",
)

LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


class AgentConfig:
    """
    Gestionnaire de configuration pour l'agent conntrack

    Cette classe centralise la configuration de l'agent : fréquence de
    collecte, sources conntrack, sortie et logging.
    """

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialise la configuration de l'agent

        Args:
            config_file: Chemin vers le fichier de configuration (optionnel)
        """
        self.config = configparser.ConfigParser()
        self.config_file = config_file or self._get_default_config_path()

        # Définir les valeurs par défaut
        self._set_defaults()

        # Charger la configuration depuis le fichier
        self._load_config()

    def _get_default_config_path(self) -> str:
        """
        Chemin par défaut du fichier de configuration

        La variable d'environnement CONNTRACK_AGENT_CONFIG est prioritaire.
        """
        return os.environ.get(
            "CONNTRACK_AGENT_CONFIG",
            "/etc/conntrack-agent/config.ini"
        )

    def _set_defaults(self):
        """
        Définit les valeurs de configuration par défaut

        Les listes files/dirs restent vides : les constantes DEFAULT_FILES et
        DEFAULT_DIRS sont résolues au début de chaque cycle.
        """
        # Configuration agent
        self.config.add_section('agent')
        self.config.set('agent', 'log_level', 'INFO')
        self.config.set('agent', 'interval', '10')

        # Configuration conntrack
        self.config.add_section('conntrack')
        self.config.set('conntrack', 'files', '')
        self.config.set('conntrack', 'dirs', '')
        self.config.set('conntrack', 'collect_stats', 'true')

        # Configuration sortie
        self.config.add_section('output')
        self.config.set('output', 'file', '')

        # Configuration logging
        self.config.add_section('logging')
        self.config.set('logging', 'log_file', '/var/log/conntrack-agent/agent.log')
        self.config.set('logging', 'max_log_size', '10485760')  # 10MB
        self.config.set('logging', 'backup_count', '5')

    def _load_config(self):
        """
        Charge la configuration depuis le fichier

        Si le fichier n'existe pas, utilise les valeurs par défaut.
        En cas d'erreur de lecture, affiche l'erreur et continue avec les défauts.
        """
        try:
            if os.path.exists(self.config_file):
                self.config.read(self.config_file)
                print(f"Configuration chargée depuis: {self.config_file}", file=sys.stderr)
            else:
                print(f"Fichier de configuration non trouvé: {self.config_file}", file=sys.stderr)
                print("Utilisation des valeurs par défaut", file=sys.stderr)

        except (configparser.Error, OSError) as e:
            print(f"Erreur lors du chargement de la configuration: {e}", file=sys.stderr)
            print("Utilisation des valeurs par défaut", file=sys.stderr)

    def get(self, section: str, option: str, fallback: Any = None) -> str:
        """
        Récupère une valeur de configuration

        Args:
            section: Nom de la section
            option: Nom de l'option
            fallback: Valeur par défaut si non trouvée

        Returns:
            str: Valeur de configuration
        """
        return self.config.get(section, option, fallback=fallback)

    def getboolean(self, section: str, option: str, fallback: bool = False) -> bool:
        """Récupère une valeur booléenne de configuration"""
        return self.config.getboolean(section, option, fallback=fallback)

    def getint(self, section: str, option: str, fallback: int = 0) -> int:
        """Récupère une valeur entière de configuration"""
        return self.config.getint(section, option, fallback=fallback)

    def getlist(self, section: str, option: str) -> List[str]:
        """
        Récupère une liste de configuration

        Les éléments sont séparés par des virgules ou des retours à la ligne,
        l'ordre est conservé et les éléments vides sont ignorés.

        Args:
            section: Nom de la section
            option: Nom de l'option

        Returns:
            list: Éléments de la liste (vide si l'option est absente)
        """
        raw = self.config.get(section, option, fallback='')
        items = []
        for line in raw.splitlines():
            for item in line.split(','):
                item = item.strip()
                if item:
                    items.append(item)
        return items

    def set(self, section: str, option: str, value):
        """
        Définit une valeur de configuration

        Les listes et tuples sont enregistrés séparés par des virgules.
        """
        if not self.config.has_section(section):
            self.config.add_section(section)
        if isinstance(value, (list, tuple)):
            value = ', '.join(value)
        elif isinstance(value, bool):
            value = 'true' if value else 'false'
        self.config.set(section, option, str(value))

    def save(self):
        """
        Sauvegarde la configuration dans le fichier

        Crée les dossiers parents si nécessaire.
        """
        config_dir = os.path.dirname(self.config_file)
        if config_dir and not os.path.exists(config_dir):
            os.makedirs(config_dir, exist_ok=True)

        with open(self.config_file, 'w') as f:
            self.config.write(f)

        print(f"Configuration sauvegardée dans: {self.config_file}", file=sys.stderr)

    def _getboolean_or_default(self, section: str, option: str, default: bool) -> bool:
        """
        Booléen de configuration, valeur par défaut si la valeur est invalide

        validate() signale la valeur invalide ; la collecte continue avec le défaut.
        """
        try:
            return self.getboolean(section, option, default)
        except ValueError:
            print(f"Valeur invalide pour {section}.{option}, utilisation de '{default}'", file=sys.stderr)
            return default

    def _getint_or_default(self, section: str, option: str, default: int) -> int:
        try:
            return self.getint(section, option, default)
        except ValueError:
            print(f"Valeur invalide pour {section}.{option}, utilisation de '{default}'", file=sys.stderr)
            return default

    def get_agent_config(self) -> Dict[str, Any]:
        return {
            'log_level': self.get('agent', 'log_level', 'INFO'),
            'interval': self._getint_or_default('agent', 'interval', 10)
        }

    def get_conntrack_config(self) -> Dict[str, Any]:
        """
        Récupère la configuration conntrack

        L'ancienne orthographe 'percpu' est acceptée si 'per_cpu' est absent.

        Returns:
            dict: files, dirs, collect_stats, per_cpu
        """
        if self.config.has_option('conntrack', 'per_cpu'):
            per_cpu = self._getboolean_or_default('conntrack', 'per_cpu', False)
        else:
            per_cpu = self._getboolean_or_default('conntrack', 'percpu', False)

        return {
            'files': self.getlist('conntrack', 'files'),
            'dirs': self.getlist('conntrack', 'dirs'),
            'collect_stats': self._getboolean_or_default('conntrack', 'collect_stats', True),
            'per_cpu': per_cpu
        }

    def get_output_config(self) -> Dict[str, Any]:
        return {
            'file': self.get('output', 'file', '') or None
        }

    def validate(self) -> bool:
        """
        Valide la configuration courante

        Returns:
            bool: True si la configuration est valide, False sinon
        """
        errors = []

        # Valider le niveau de log
        log_level = self.get('agent', 'log_level')
        if log_level not in LOG_LEVELS:
            errors.append("Niveau de log invalide")

        # Valider l'intervalle de collecte
        try:
            if self.getint('agent', 'interval') < 1:
                errors.append("Intervalle de collecte invalide (doit être >= 1 seconde)")
        except ValueError:
            errors.append("Intervalle de collecte invalide (entier attendu)")

        # Valider les booléens conntrack
        for option in ('collect_stats', 'per_cpu', 'percpu'):
            if not self.config.has_option('conntrack', option):
                continue
            try:
                self.getboolean('conntrack', option)
            except ValueError:
                errors.append(f"Valeur booléenne invalide pour conntrack.{option}")

        if errors:
            for error in errors:
                print(f"Erreur de configuration: {error}", file=sys.stderr)
            return False

        return True


# Fonction utilitaire pour créer une configuration par défaut
def create_default_config(config_path: str) -> AgentConfig:
    """
    Crée un fichier de configuration par défaut

    Args:
        config_path: Chemin où créer le fichier de configuration

    Returns:
        AgentConfig: Instance de configuration créée
    """
    config = AgentConfig(config_path)
    config.save()
    return config
