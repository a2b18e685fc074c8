from policy.enums import ROLE_OPTIONS, ROLES, EMPLOYEE, MANAGER, FINANCE, ADMIN

__all__ = ["ROLE_OPTIONS", "ROLES", "EMPLOYEE", "MANAGER", "FINANCE", "ADMIN"]
