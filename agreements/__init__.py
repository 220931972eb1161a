"""
Rental agreement generation.

Exposes the four request-level operations so routing layers (HTTP now, CLI
too) call one package instead of reaching into submodules.
"""

from .costs import calculate_total_costs
from .duration import calculate_duration
from .service import generate_agreement
from .validation import validate_agreement_data

__all__ = [
    "calculate_duration",
    "calculate_total_costs",
    "generate_agreement",
    "validate_agreement_data",
]
