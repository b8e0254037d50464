"""
Exceptions métier du flux de publication par lot.

Les erreurs de validation ne sont pas levées: elles sont collectées dans une
ValidationErrorMap (dict plat) et renvoyées en une seule réponse.
"""


class JobPostError(Exception):
    def __init__(self, message: str, code: str = "error"):
        super().__init__(message)
        self.code = code


class SubmissionError(JobPostError):
    """Soumission multipart illisible (boundary absente, champ trop gros...)."""

    def __init__(self, message: str, code: str = "invalid_submission"):
        super().__init__(message, code)


class UploadError(SubmissionError):
    """Échec de l'upload du logo: fatal pour la tentative en cours."""

    def __init__(self, message: str, code: str = "upload_failed"):
        super().__init__(message, code)


class GatewayError(JobPostError):
    """Passerelle de paiement injoignable ou refus (création/lecture de commande)."""

    def __init__(self, message: str, code: str = "gateway_error"):
        super().__init__(message, code)


class VerificationFailure(JobPostError):
    """Paiement capturé mais preuve rejetée (signature, montant, payload altéré)."""

    def __init__(self, message: str, code: str = "verification_failed"):
        super().__init__(message, code)


class PricingConfigError(JobPostError):
    def __init__(self, message: str, code: str = "pricing_config"):
        super().__init__(message, code)


class HandshakeStateError(JobPostError):
    def __init__(self, message: str, code: str = "invalid_state"):
        super().__init__(message, code)
