"""cosaf.core: Foundation layer.

Contains the colour and partition services, the data model (Value,
Candidates, Scheme, Parameters), the factory interfaces, configuration and
the report builder. This module has NO dependencies on cosaf.strategies,
cosaf.solver, cosaf.registry or cosaf.adjuster.
"""
