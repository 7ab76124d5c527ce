from enum import StrEnum

class Role(StrEnum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"

class ProviderName(StrEnum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"

class ErrorType(StrEnum):
    VALIDATION = "validation"
    UPSTREAM = "upstream"
    CONFIGURATION = "configuration"
    UNAVAILABLE = "unavailable"
    BUSY = "busy"
    INTERNAL = "internal"
