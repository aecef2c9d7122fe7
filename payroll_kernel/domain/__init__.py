"""Pure domain value objects and abstractions for the payroll kernel."""
