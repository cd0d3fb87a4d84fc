"""Drayage charge and compliance rules engine."""
