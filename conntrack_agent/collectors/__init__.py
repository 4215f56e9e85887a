"""
Package des collecteurs de données pour l'agent conntrack

Ce package contient les collecteurs spécialisés :
- Collecteur de base (classe abstraite)
- Collecteur des fichiers de compteurs conntrack
- Collecteur des statistiques conntrack (agrégées ou par CPU)
- Fournisseurs de statistiques spécifiques par plateforme
"""
