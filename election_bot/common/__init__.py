from .enums import ErrorType, ProviderName, Role

__all__ = ["ErrorType", "ProviderName", "Role"]
