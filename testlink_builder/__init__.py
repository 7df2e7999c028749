"""Build step TestLink : exécution des tests automatisés et remontée des résultats."""

__version__ = "0.1.0"
