"""
Payroll Kernel

Shared foundation for the payroll engine and its modules:
- Typed exception hierarchy with machine-readable codes
- Structured JSON logging
- Decimal-only Money/Currency value objects
- SQLAlchemy declarative base and session management
"""

__version__ = "0.1.0"
