"""
endpointwizard - Interactive setup of a GraphQL database server endpoint
"""

__version__ = "0.1.0"

from .core import EndpointDialog, SetupWizard, WizardError

__all__ = ["EndpointDialog", "SetupWizard", "WizardError"]
