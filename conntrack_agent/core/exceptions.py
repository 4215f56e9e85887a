"""
Exceptions de l'agent conntrack

Deux familles d'erreurs :
- Erreurs fatales pour un cycle de collecte (aucune métrique collectée)
- Erreurs des fournisseurs de statistiques (non fatales, reportées)
"""

MODULE_NOT_LOADED_MESSAGE = (
    "Le plugin conntrack n'a collecté aucune métrique. "
    "Le module noyau conntrack est-il chargé ?"
)


class ConntrackAgentError(Exception):
    """Classe de base des erreurs de l'agent"""


class ConntrackUnavailableError(ConntrackAgentError):
    """
    Aucun compteur conntrack n'a pu être lu pendant le cycle

    Signale que le module noyau (nf_conntrack / ip_conntrack) n'est
    probablement pas chargé sur cet hôte.
    """

    def __init__(self, message: str = MODULE_NOT_LOADED_MESSAGE, result=None):
        super().__init__(message)
        # Mesures et erreurs non fatales déjà produites par le cycle
        self.result = result


class StatsProviderError(ConntrackAgentError):
    """Échec du fournisseur de statistiques conntrack de la plateforme"""
