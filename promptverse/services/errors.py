class ServiceError(Exception):
    pass


class IdentityProviderError(ServiceError):
    pass


class EnhancementError(ServiceError):
    pass


class GeminiConfigurationError(EnhancementError):
    pass


class GeminiPromptError(EnhancementError):
    pass
