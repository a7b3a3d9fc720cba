"""Domain errors for endpointwizard."""


class WizardError(RuntimeError):
    """Raised when the endpoint setup cannot continue safely."""
