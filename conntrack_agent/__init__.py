"""
Agent conntrack - Collecte des compteurs de suivi de connexions

Ce module lit les compteurs conntrack exposés par le noyau (/proc/sys et
/proc/net/stat), normalise leurs noms selon la version du noyau et les
émet sous forme de mesures.

Version: 1.0.0
"""

__version__ = "1.0.0"

from .core.collector import ConntrackCollector
from .core.config import AgentConfig
from .core.logger import AgentLogger

__all__ = ['ConntrackCollector', 'AgentConfig', 'AgentLogger']
