"""
payroll_modules -- service and persistence glue around the payroll engines.

Each subpackage pairs a service facade with its ORM models and
collaborator implementations.  Currently: ``salary``.
"""
