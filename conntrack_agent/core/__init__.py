"""
Module Core - Composants principaux de l'agent conntrack

Ce module contient les fonctionnalités de base de l'agent :
- Configuration
- Logging
- Accumulation des mesures et erreurs
- Orchestration d'un cycle de collecte
- Planification des cycles
"""
