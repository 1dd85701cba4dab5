"""Gestão de Demandas: CRUD service for work-item records with audit and JSON backups."""

__version__ = "1.0.0"
