"""
Collecteur des compteurs conntrack exposés sous /proc/sys

Ce module parcourt les répertoires et fichiers configurés :
- Normalisation des préfixes nf_ et ip_ vers une seule clé
- Lecture et conversion des valeurs numériques
- Les fichiers absents sont ignorés silencieusement
"""

import os
from typing import Dict, Optional

from .base import BaseCollector
from ..core.config import DEFAULT_DIRS, DEFAULT_FILES


METRIC_PREFIX = "ip_"


def metric_key(filename: str) -> Optional[str]:
    """
    Calcule la clé de métrique normalisée d'un nom de fichier

    nf_conntrack_count et ip_conntrack_count donnent tous deux
    ip_conntrack_count.

    Args:
        filename: Nom de fichier candidat

    Returns:
        str: Clé normalisée, ou None si le nom ne contient pas de '_'
    """
    parts = filename.split('_', 1)
    if len(parts) < 2:
        return None
    return METRIC_PREFIX + parts[1]


def parse_value(value: str) -> float:
    """
    Convertit le contenu d'un fichier en flottant

    Les séparateurs '_' acceptés par float() sont refusés.

    Raises:
        ValueError: si la valeur n'est pas un nombre
    """
    if '_' in value:
        raise ValueError(f"séparateur '_' non autorisé: {value!r}")
    return float(value)


class ConntrackFileCollector(BaseCollector):
    """
    Collecteur des fichiers de compteurs conntrack

    Les répertoires sont parcourus dans l'ordre configuré : pour une même
    clé, la valeur du dernier répertoire l'emporte.
    """

    def _resolve_sources(self):
        conntrack_config = self.config.get_conntrack_config()
        dirs = conntrack_config['dirs'] or list(DEFAULT_DIRS)
        files = conntrack_config['files'] or list(DEFAULT_FILES)
        return dirs, files

    def collect(self, accumulator) -> Dict[str, float]:
        """
        Lit tous les couples (répertoire, fichier) configurés

        Args:
            accumulator: Accumulateur recevant les erreurs non fatales

        Returns:
            dict: Champs collectés, clé normalisée -> valeur flottante
        """
        self._start_collection()

        dirs, files = self._resolve_sources()
        fields = {}

        for directory in dirs:
            for filename in files:
                key = metric_key(filename)
                if key is None:
                    self.logger.debug(f"Nom de fichier ignoré (sans '_'): {filename}")
                    continue

                file_path = os.path.join(directory, filename)
                if not os.path.exists(file_path):
                    self.logger.debug(f"Fichier non trouvé: {file_path}")
                    continue

                try:
                    with open(file_path, 'r', encoding='utf-8') as f:
                        contents = f.read()
                except (OSError, UnicodeDecodeError) as e:
                    self._record_error(accumulator, f"Échec de lecture du fichier '{file_path}': {e}")
                    continue

                value = contents.strip()
                try:
                    fields[key] = parse_value(value)
                except ValueError as e:
                    self._record_error(
                        accumulator,
                        f"Échec de conversion de la métrique, nombre attendu mais '{value}' trouvé: {e}"
                    )

        self.logger.debug(f"{len(fields)} champ(s) conntrack collecté(s)")
        self.last_collection_duration = self._end_collection()
        return fields
