"""
Accumulateur de mesures pour l'agent conntrack

Ce module reçoit tout ce qu'un cycle de collecte produit :
- Les enregistrements de champs (sans tags)
- Les enregistrements de compteurs taggés
- Les erreurs non fatales, qui n'interrompent pas le cycle
"""

from datetime import datetime
from typing import Dict, Any, List, Optional


KIND_FIELDS = "fields"
KIND_COUNTER = "counter"


class Measurement:
    """
    Une mesure émise par un collecteur

    Attributes:
        name: Nom de la mesure (ex: "conntrack")
        fields: Valeurs numériques nommées
        tags: Tags identifiant la série (peut être vide)
        kind: "fields" ou "counter" (valeurs cumulées depuis le boot)
        timestamp: Date d'émission
    """

    def __init__(self, name: str, fields: Dict[str, Any],
                 tags: Optional[Dict[str, str]] = None,
                 kind: str = KIND_FIELDS,
                 timestamp: Optional[datetime] = None):
        self.name = name
        self.fields = dict(fields)
        self.tags = dict(tags) if tags else {}
        self.kind = kind
        self.timestamp = timestamp or datetime.now()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'kind': self.kind,
            'tags': self.tags,
            'fields': self.fields,
            'timestamp': self.timestamp.isoformat()
        }

    def __repr__(self):
        return f"Measurement({self.name!r}, kind={self.kind!r}, tags={self.tags!r}, fields={self.fields!r})"


class MetricsAccumulator:
    """
    Collecte les mesures et les erreurs non fatales d'un cycle

    Un accumulateur neuf est créé pour chaque cycle, rien n'est conservé
    d'un cycle à l'autre.
    """

    def __init__(self):
        self.measurements: List[Measurement] = []
        self.errors: List[str] = []

    def add_fields(self, name: str, fields: Dict[str, Any],
                   tags: Optional[Dict[str, str]] = None):
        """
        Ajoute un enregistrement de champs

        Args:
            name: Nom de la mesure
            fields: Champs numériques
            tags: Tags optionnels
        """
        self.measurements.append(Measurement(name, fields, tags, KIND_FIELDS))

    def add_counter(self, name: str, fields: Dict[str, Any],
                    tags: Optional[Dict[str, str]] = None):
        """
        Ajoute un enregistrement de compteurs (valeurs monotones cumulées)

        Args:
            name: Nom de la mesure
            fields: Compteurs entiers non signés
            tags: Tags identifiant la série
        """
        self.measurements.append(Measurement(name, fields, tags, KIND_COUNTER))

    def add_error(self, error):
        """
        Enregistre une erreur non fatale

        Args:
            error: Message ou exception
        """
        self.errors.append(str(error))

    def get_measurements(self, name: Optional[str] = None,
                         kind: Optional[str] = None) -> List[Measurement]:
        """
        Filtre les mesures collectées

        Args:
            name: Nom de mesure recherché (tous si None)
            kind: Type recherché (tous si None)

        Returns:
            list: Mesures correspondantes, dans l'ordre d'émission
        """
        return [
            m for m in self.measurements
            if (name is None or m.name == name) and (kind is None or m.kind == kind)
        ]

    def to_dict(self) -> Dict[str, Any]:
        """Représentation JSON du cycle"""
        return {
            'measurements': [m.to_dict() for m in self.measurements],
            'errors': list(self.errors)
        }
