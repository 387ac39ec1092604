"""Temporal workflows that resume, suspend and scale Microsoft Fabric capacities."""
