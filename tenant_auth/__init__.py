"""
Tenant Auth Service

Token lifecycle and tenant/role enforcement for a multi-tenant platform.
"""

__version__ = "0.1.0"
