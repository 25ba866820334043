"""
Column schema model and schema JSON documents.

Defines the passive value objects that describe each side of a migration and
the readers/writers for their JSON representation.
"""
