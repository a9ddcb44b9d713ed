"""HTTP blueprints. Each calls into chitfund.services."""
