"""Event Roster package.

Bulk import of participant and staff rosters from CSV files, organized by
feature modules (importing, records, taxonomy, settings) with a thin Flask
controller layer over service/repository layers.
"""
