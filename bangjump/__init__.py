# bangjump package
"""
Bang redirect engine.

Type a query with a short trigger such as "!w albert einstein" and get sent
to the matching service with the rest of the query substituted in.

Subpackages:
  - search: Bang definitions, catalog, ranking, and redirect resolution
  - services: Background matching worker and settings provider
  - suggestions: Autocomplete state machine and controller
"""

__version__ = "0.1.0.dev0"
